"""
restaurant/routers/cart.py
Cart endpoints (customers only): add by menu item id, change quantity, remove one line,
clear, and get the cart with its total.

Behavior
- Add reads the menu item once and stores a name/price snapshot in the cart line.
- Quantity updates to 0 or below remove the line; removing a missing line is not an error.
- Totals are recomputed from the lines on every response.
"""
from fastapi import APIRouter, Depends, Response, status

from restaurant.config import get_db, settings
from restaurant.core.errors import ValidationError
from restaurant.core.security import require_customer
from restaurant.schemas.cart import AddItemBody, CartOut, UpdateQuantityBody
from restaurant.schemas.principal import Principal
from restaurant.services import menu as menu_service
from restaurant.services.cart import CartStore, cart_to_out

router = APIRouter(prefix="/cart", tags=["Cart"])


def _out(uid, cart):
    return cart_to_out(uid, cart, settings.currency.upper())


@router.get("", response_model=CartOut)
def get_cart(principal: Principal = Depends(require_customer), db=Depends(get_db)):
    return _out(principal.uid, CartStore(db).load(principal.uid))


@router.post("/items", response_model=CartOut)
def add_to_cart(body: AddItemBody, principal: Principal = Depends(require_customer), db=Depends(get_db)):
    item = menu_service.get_item(db, body.menu_item_id)
    if not item["is_available"]:
        raise ValidationError(f"{item['name']} is currently unavailable")

    store = CartStore(db)
    cart = store.load(principal.uid)
    cart.add(
        item["id"],
        item["name"],
        item["price"],
        quantity=body.quantity,
        special_instructions=(body.special_instructions or "").strip() or None,
    )
    store.save(principal.uid, cart)
    return _out(principal.uid, cart)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_quantity(
    item_id: str,
    body: UpdateQuantityBody,
    principal: Principal = Depends(require_customer),
    db=Depends(get_db),
):
    store = CartStore(db)
    cart = store.load(principal.uid)
    cart.update_quantity(item_id, body.quantity)
    store.save(principal.uid, cart)
    return _out(principal.uid, cart)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_cart_item(item_id: str, principal: Principal = Depends(require_customer), db=Depends(get_db)):
    store = CartStore(db)
    cart = store.load(principal.uid)
    cart.remove(item_id)
    store.save(principal.uid, cart)
    return _out(principal.uid, cart)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_cart(principal: Principal = Depends(require_customer), db=Depends(get_db)):
    CartStore(db).clear(principal.uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
