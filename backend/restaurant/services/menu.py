# restaurant/services/menu.py
"""
Menu catalogue on Firestore: `menu_categories` and `menu_items`.

Public reads (list/filter/search, single item) and admin writes. Deleting a
category deletes its items too, in write batches of at most 500 operations.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud.firestore_v1 import SERVER_TIMESTAMP, FieldFilter

from restaurant.config import collection_name
from restaurant.core.errors import NotFound, PlatformError, ValidationError
from restaurant.schemas.menu import CategoryCreate, CategoryUpdate, MenuItemCreate, MenuItemUpdate
from restaurant.services.cart import to_money

logger = logging.getLogger("restaurant.menu")

# Firestore rejects write batches with more than 500 operations
_BATCH_LIMIT = 500


def _categories(db):
    return db.collection(collection_name("menu_categories"))


def _items(db):
    return db.collection(collection_name("menu_items"))


def _category_out(snap) -> Dict[str, Any]:
    data = snap.to_dict() or {}
    return {
        "id": snap.id,
        "name": data.get("name", ""),
        "description": data.get("description"),
        "created_at": data.get("created_at"),
    }


def _item_out(snap) -> Dict[str, Any]:
    data = snap.to_dict() or {}
    return {
        "id": snap.id,
        "name": data.get("name", ""),
        "description": data.get("description"),
        "price": float(data.get("price", 0) or 0),
        "category_id": data.get("category_id"),
        "is_available": bool(data.get("is_available", True)),
        "image_url": data.get("image_url"),
        "created_at": data.get("created_at"),
        "updated_at": data.get("updated_at"),
    }


def _clean_text(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def _exists(ref, what: str) -> bool:
    try:
        return ref.get().exists
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not read {what}: {exc}") from exc


def _require_category(db, category_id: str) -> None:
    if not category_id or not _exists(_categories(db).document(category_id), "category"):
        raise ValidationError(f"Unknown category: {category_id}")


# ---------- categories ----------

def list_categories(db) -> List[Dict[str, Any]]:
    try:
        docs = list(_categories(db).order_by("name").stream())
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not list categories: {exc}") from exc
    return [_category_out(d) for d in docs]


def create_category(db, body: CategoryCreate) -> Dict[str, Any]:
    name = _clean_text(body.name)
    if not name:
        raise ValidationError("Category name is required")
    ref = _categories(db).document()
    try:
        ref.set({
            "name": name,
            "description": _clean_text(body.description),
            "created_at": SERVER_TIMESTAMP,
        })
        snap = ref.get()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not create category: {exc}") from exc
    logger.info("Category created: %s (%s)", ref.id, name)
    return _category_out(snap)


def update_category(db, category_id: str, body: CategoryUpdate) -> Dict[str, Any]:
    ref = _categories(db).document(category_id)
    if not _exists(ref, "category"):
        raise NotFound("Category", category_id)

    patch: Dict[str, Any] = {}
    if body.name is not None:
        name = _clean_text(body.name)
        if not name:
            raise ValidationError("Category name is required")
        patch["name"] = name
    if body.description is not None:
        patch["description"] = _clean_text(body.description)

    try:
        if patch:
            ref.update(patch)
        snap = ref.get()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not update category: {exc}") from exc
    return _category_out(snap)


def delete_category(db, category_id: str) -> int:
    """Deletes the category and all of its items. Returns the number of items removed."""
    ref = _categories(db).document(category_id)
    if not _exists(ref, "category"):
        raise NotFound("Category", category_id)
    try:
        item_docs = list(
            _items(db).where(filter=FieldFilter("category_id", "==", category_id)).stream()
        )
        refs = [d.reference for d in item_docs] + [ref]
        for start in range(0, len(refs), _BATCH_LIMIT):
            batch = db.batch()
            for r in refs[start:start + _BATCH_LIMIT]:
                batch.delete(r)
            batch.commit()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not delete category: {exc}") from exc
    logger.info("Category deleted: %s (%d items)", category_id, len(item_docs))
    return len(item_docs)


# ---------- items ----------

def list_items(
    db,
    category_id: Optional[str] = None,
    search: Optional[str] = None,
    only_available: bool = False,
) -> List[Dict[str, Any]]:
    """
    Items ordered by name. `search` matches name or description, case-insensitive;
    Firestore has no substring query so the match runs here. No match -> [].
    """
    q = _items(db)
    if category_id:
        q = q.where(filter=FieldFilter("category_id", "==", category_id))
    try:
        docs = list(q.stream())
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not list menu items: {exc}") from exc

    out = [_item_out(d) for d in docs]
    term = (search or "").strip().lower()
    if term:
        out = [
            it for it in out
            if term in it["name"].lower() or term in (it["description"] or "").lower()
        ]
    if only_available:
        out = [it for it in out if it["is_available"]]
    out.sort(key=lambda it: it["name"].lower())
    return out


def get_item(db, item_id: str) -> Dict[str, Any]:
    try:
        snap = _items(db).document(item_id).get()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not read menu item: {exc}") from exc
    if not snap.exists:
        raise NotFound("Menu item", item_id)
    return _item_out(snap)


def create_item(db, body: MenuItemCreate) -> Dict[str, Any]:
    name = _clean_text(body.name)
    if not name:
        raise ValidationError("Name, price, and category are required")
    price = to_money(body.price)
    if price <= 0:
        raise ValidationError("Price must be a positive number")
    _require_category(db, body.category_id)

    ref = _items(db).document()
    try:
        ref.set({
            "name": name,
            "description": _clean_text(body.description),
            "price": float(price),
            "category_id": body.category_id,
            "is_available": bool(body.is_available),
            "image_url": _clean_text(body.image_url),
            "created_at": SERVER_TIMESTAMP,
            "updated_at": SERVER_TIMESTAMP,
        })
        snap = ref.get()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not create menu item: {exc}") from exc
    logger.info("Menu item created: %s (%s @ %s)", ref.id, name, price)
    return _item_out(snap)


def update_item(db, item_id: str, body: MenuItemUpdate) -> Dict[str, Any]:
    ref = _items(db).document(item_id)
    if not _exists(ref, "menu item"):
        raise NotFound("Menu item", item_id)

    patch: Dict[str, Any] = {}
    sent = body.model_dump(exclude_unset=True)
    if "name" in sent:
        name = _clean_text(sent["name"])
        if not name:
            raise ValidationError("Item name is required")
        patch["name"] = name
    if "description" in sent:
        patch["description"] = _clean_text(sent["description"])
    if sent.get("price") is not None:
        price = to_money(sent["price"])
        if price <= 0:
            raise ValidationError("Price must be a positive number")
        patch["price"] = float(price)
    if sent.get("category_id") is not None:
        _require_category(db, sent["category_id"])
        patch["category_id"] = sent["category_id"]
    if sent.get("is_available") is not None:
        patch["is_available"] = bool(sent["is_available"])
    if "image_url" in sent:
        patch["image_url"] = _clean_text(sent["image_url"])

    try:
        if patch:
            patch["updated_at"] = SERVER_TIMESTAMP
            ref.update(patch)
        snap = ref.get()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not update menu item: {exc}") from exc
    if patch:
        logger.info("Menu item updated: %s fields=%s", item_id, sorted(k for k in patch if k != "updated_at"))
    return _item_out(snap)


def delete_item(db, item_id: str) -> None:
    ref = _items(db).document(item_id)
    if not _exists(ref, "menu item"):
        raise NotFound("Menu item", item_id)
    try:
        ref.delete()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not delete menu item: {exc}") from exc
    logger.info("Menu item deleted: %s", item_id)
