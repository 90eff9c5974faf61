# restaurant/routers/menu.py
"""
Menu
- Public: GET /menu/categories, GET /menu/items (category + search filters), GET /menu/items/{id}
- Admin : /admin/categories and /admin/menu-items -> create/update/delete
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from restaurant.config import get_db
from restaurant.core.security import require_admin
from restaurant.schemas.menu import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    MenuItemCreate,
    MenuItemOut,
    MenuItemUpdate,
)
from restaurant.services import menu as menu_service

# ---------- Public ----------
router = APIRouter(prefix="/menu", tags=["Menu"])


@router.get("/categories", response_model=List[CategoryOut], summary="List Categories")
def list_categories(db=Depends(get_db)):
    """Categories ordered by name."""
    return menu_service.list_categories(db)


@router.get("/items", response_model=List[MenuItemOut], summary="List Menu Items")
def list_items(
    category_id: Optional[str] = Query(None, description="Only items of this category"),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or description"),
    available: bool = Query(False, description="Only items that can be ordered right now"),
    db=Depends(get_db),
):
    return menu_service.list_items(db, category_id=category_id, search=search, only_available=available)


@router.get("/items/{item_id}", response_model=MenuItemOut, summary="Get Menu Item")
def get_item(item_id: str, db=Depends(get_db)):
    return menu_service.get_item(db, item_id)


# ---------- Admin ----------
admin_router = APIRouter(tags=["Admin: Menu"], dependencies=[Depends(require_admin)])


@admin_router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(body: CategoryCreate, db=Depends(get_db)):
    return menu_service.create_category(db, body)


@admin_router.patch("/categories/{category_id}", response_model=CategoryOut)
def update_category(category_id: str, body: CategoryUpdate, db=Depends(get_db)):
    return menu_service.update_category(db, category_id, body)


@admin_router.delete("/categories/{category_id}")
def delete_category(category_id: str, db=Depends(get_db)):
    """Deletes the category together with all of its items."""
    removed = menu_service.delete_category(db, category_id)
    return {"detail": "Category deleted", "items_deleted": removed}


@admin_router.post("/menu-items", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
def create_item(body: MenuItemCreate, db=Depends(get_db)):
    return menu_service.create_item(db, body)


@admin_router.patch("/menu-items/{item_id}", response_model=MenuItemOut)
def update_item(item_id: str, body: MenuItemUpdate, db=Depends(get_db)):
    """Partial update: only the fields present in the body are written."""
    return menu_service.update_item(db, item_id, body)


@admin_router.delete("/menu-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: str, db=Depends(get_db)):
    menu_service.delete_item(db, item_id)
