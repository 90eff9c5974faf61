# restaurant/services/orders.py
"""
Order lifecycle on Firestore.

Checkout turns a Cart into three sequential writes:
  1. `orders/{id}`         status='pending', total_amount = cart total
  2. `order_items/*`       one row per cart line (name/price snapshot), single batch
  3. `payments/*`          amount = order total, settled immediately
Each step waits for the previous one. There is no compensation: if step 2 or 3
fails the earlier records stay in place and the PlatformError reaches the caller.
The cart is emptied only after all three writes succeed.

Staff move orders between statuses with `set_status`; the last write wins.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import FailedPrecondition, GoogleAPICallError
from google.cloud.firestore_v1 import SERVER_TIMESTAMP, FieldFilter

from restaurant.config import collection_name, settings
from restaurant.core.errors import NotFound, PlatformError, ValidationError
from restaurant.schemas.order import (
    ACTIVE_STATUSES,
    INITIAL_STATUS,
    ORDER_STATUSES,
    ORDER_TYPES,
    PAYMENT_METHODS,
    CheckoutBody,
)
from restaurant.schemas.principal import Principal
from restaurant.services.cart import Cart, CartStore, to_cents

logger = logging.getLogger("restaurant.orders")

# Firestore caps `in` filters at 30 values
_IN_CHUNK = 30


def _orders(db):
    return db.collection(collection_name("orders"))


def _order_items(db):
    return db.collection(collection_name("order_items"))


def _payments(db):
    return db.collection(collection_name("payments"))


# ──────────────────────────────────────────────────────────────────────────────
# Checkout
# ──────────────────────────────────────────────────────────────────────────────

def validate_checkout(principal: Optional[Principal], cart: Cart, body: CheckoutBody) -> Optional[int]:
    """Raises ValidationError before anything is written. Returns the table number to store."""
    if principal is None or not principal.uid:
        raise ValidationError("Please login to place an order")
    if cart.is_empty():
        raise ValidationError("Your cart is empty")
    if body.order_type not in ORDER_TYPES:
        raise ValidationError(f"Invalid order type: {body.order_type!r}")
    if body.payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment method: {body.payment_method!r}")

    if body.order_type != "dine-in":
        return None
    table = body.table_number
    if table is None:
        raise ValidationError("Please enter table number for dine-in orders")
    if isinstance(table, bool) or not isinstance(table, int) or table <= 0:
        raise ValidationError("Table number must be a positive integer")
    return table


def _order_item_rows(order_id: str, cart: Cart) -> List[Dict[str, Any]]:
    return [
        {
            "order_id": order_id,
            "item_id": it.id,
            "item_name": it.name,
            "quantity": it.quantity,
            "unit_price": float(it.unit_price),
            "subtotal": float(it.subtotal),
            "subtotal_cents": to_cents(it.subtotal),
            "special_instructions": it.special_instructions or None,
        }
        for it in cart.items
    ]


def submit_order(
    db,
    principal: Optional[Principal],
    cart: Cart,
    body: CheckoutBody,
    store: Optional[CartStore] = None,
) -> Dict[str, Any]:
    """
    Places the order for `cart`. On success returns {"order", "items", "payment"}
    and leaves the cart (and its stored copy, when `store` is given) empty.
    """
    table_number = validate_checkout(principal, cart, body)
    uid = principal.uid
    total = cart.total_amount
    currency = settings.currency.upper()

    # 1) Order
    order_id = str(uuid.uuid4())
    order_ref = _orders(db).document(order_id)
    order_doc = {
        "customer_id": uid,
        "order_type": body.order_type,
        "table_number": table_number,
        "total_amount": float(total),
        "total_cents": to_cents(total),
        "notes": (body.notes or "").strip() or None,
        "status": INITIAL_STATUS,
        "currency": currency,
        "created_at": SERVER_TIMESTAMP,
        "updated_at": SERVER_TIMESTAMP,
    }
    try:
        order_ref.set(dict(order_doc))
    except GoogleAPICallError as exc:
        logger.error("Checkout failed at step=order uid=%s: %s", uid, exc)
        raise PlatformError(f"Failed to place order: {exc}", step="order") from exc

    # 2) Order items (snapshots, one batch)
    rows = _order_item_rows(order_id, cart)
    item_refs = []
    try:
        batch = db.batch()
        for row in rows:
            ref = _order_items(db).document()
            batch.set(ref, row)
            item_refs.append(ref)
        batch.commit()
    except GoogleAPICallError as exc:
        logger.error("Checkout failed at step=order_items order=%s: %s", order_id, exc)
        raise PlatformError(f"Failed to save order items: {exc}", step="order_items", order_id=order_id) from exc

    # 3) Payment (settled immediately)
    payment_ref = _payments(db).document()
    payment_doc = {
        "order_id": order_id,
        "amount": float(total),
        "amount_cents": to_cents(total),
        "method": body.payment_method,
        "status": "completed",
        "currency": currency,
        "paid_at": SERVER_TIMESTAMP,
    }
    try:
        payment_ref.set(dict(payment_doc))
    except GoogleAPICallError as exc:
        logger.error("Checkout failed at step=payment order=%s: %s", order_id, exc)
        raise PlatformError(f"Failed to record payment: {exc}", step="payment", order_id=order_id) from exc

    # 4) All three writes succeeded
    cart.clear()
    if store is not None:
        try:
            store.clear(uid)
        except PlatformError:
            # The order exists; a stale stored cart must not turn it into a failure.
            logger.exception("Order %s placed but stored cart for %s was not cleared", order_id, uid)

    logger.info(
        "Order placed: id=%s customer=%s type=%s items=%d total=%s %s",
        order_id, uid, body.order_type, len(rows), total, currency,
    )

    # The response comes from what was written; only server timestamps are read back.
    order_doc.update(_written_timestamps(order_ref, ("created_at", "updated_at")))
    payment_doc.update(_written_timestamps(payment_ref, ("paid_at",)))
    items_out = [_order_item_doc_to_out(_Written(ref.id, row)) for ref, row in zip(item_refs, rows)]
    order_out = _order_doc_to_out(_Written(order_id, order_doc))
    order_out["items"] = items_out
    payment_out = _payment_doc_to_out(_Written(payment_ref.id, payment_doc))
    return {"order": order_out, "items": items_out, "payment": payment_out}


class _Written:
    """Snapshot-shaped view of a payload this process just wrote."""

    def __init__(self, doc_id: str, data: Dict[str, Any]):
        self.id = doc_id
        self._data = data

    def to_dict(self) -> Dict[str, Any]:
        return self._data


def _written_timestamps(ref, fields: Iterable[str]) -> Dict[str, Any]:
    """Resolved SERVER_TIMESTAMP values, or None for each field when the read fails."""
    try:
        data = ref.get().to_dict() or {}
    except GoogleAPICallError as exc:
        logger.warning("Could not read back timestamps for %s: %s", ref.id, exc)
        data = {}
    return {f: data.get(f) for f in fields}


# ──────────────────────────────────────────────────────────────────────────────
# Reads
# ──────────────────────────────────────────────────────────────────────────────

def _cents(d: Dict[str, Any], cents_key: str, amount_key: str) -> int:
    # documents written before cents were stored only carry the float amount
    if d.get(cents_key) is not None:
        return int(d[cents_key])
    return to_cents(d.get(amount_key, 0) or 0)


def _order_doc_to_out(doc) -> Dict[str, Any]:
    d = doc.to_dict() or {}
    return {
        "id": doc.id,
        "customer_id": d.get("customer_id", ""),
        "order_type": d.get("order_type", "takeaway"),
        "table_number": d.get("table_number"),
        "total_amount": float(d.get("total_amount", 0) or 0),
        "total_cents": _cents(d, "total_cents", "total_amount"),
        "notes": d.get("notes"),
        "status": d.get("status", INITIAL_STATUS),
        "currency": d.get("currency") or settings.currency.upper(),
        "created_at": d.get("created_at"),
        "updated_at": d.get("updated_at"),
        "items": [],
    }


def _order_item_doc_to_out(doc) -> Dict[str, Any]:
    d = doc.to_dict() or {}
    return {
        "id": doc.id,
        "order_id": d.get("order_id", ""),
        "item_id": d.get("item_id"),
        "item_name": d.get("item_name", ""),
        "quantity": int(d.get("quantity", 1)),
        "unit_price": float(d.get("unit_price", 0) or 0),
        "subtotal": float(d.get("subtotal", 0) or 0),
        "subtotal_cents": _cents(d, "subtotal_cents", "subtotal"),
        "special_instructions": d.get("special_instructions"),
    }


def _payment_doc_to_out(doc) -> Dict[str, Any]:
    d = doc.to_dict() or {}
    return {
        "id": doc.id,
        "order_id": d.get("order_id", ""),
        "amount": float(d.get("amount", 0) or 0),
        "amount_cents": _cents(d, "amount_cents", "amount"),
        "method": d.get("method", "card"),
        "status": d.get("status", "completed"),
        "paid_at": d.get("paid_at"),
    }


def _newest_first(docs: Iterable) -> List:
    def key(doc):
        created = (doc.to_dict() or {}).get("created_at")
        return (created is not None, created or datetime.min)
    return sorted(docs, key=key, reverse=True)


def _stream_newest_first(query) -> List:
    """created_at DESC; without the composite index sort in-process instead."""
    try:
        return list(query.order_by("created_at", direction=firestore.Query.DESCENDING).stream())
    except FailedPrecondition:
        logger.warning("Missing Firestore index for ordered query; sorting in-process")
        return _newest_first(query.stream())


def _attach_items(db, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    by_id = {o["id"]: o for o in orders}
    ids = list(by_id)
    for i in range(0, len(ids), _IN_CHUNK):
        chunk = ids[i:i + _IN_CHUNK]
        for doc in _order_items(db).where(filter=FieldFilter("order_id", "in", chunk)).stream():
            item = _order_item_doc_to_out(doc)
            owner = by_id.get(item["order_id"])
            if owner is not None:
                owner["items"].append(item)
    return orders


def get_order(db, order_id: str) -> Dict[str, Any]:
    try:
        snap = _orders(db).document(order_id).get()
        if not snap.exists:
            raise NotFound("Order", order_id)
        return _attach_items(db, [_order_doc_to_out(snap)])[0]
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not read order: {exc}") from exc


def get_payment(db, order_id: str) -> Optional[Dict[str, Any]]:
    try:
        docs = list(_payments(db).where(filter=FieldFilter("order_id", "==", order_id)).limit(1).stream())
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not read payment: {exc}") from exc
    return _payment_doc_to_out(docs[0]) if docs else None


def list_customer_orders(db, uid: str) -> List[Dict[str, Any]]:
    """A customer's own orders, newest first, each with its items."""
    try:
        docs = _stream_newest_first(_orders(db).where(filter=FieldFilter("customer_id", "==", uid)))
        return _attach_items(db, [_order_doc_to_out(d) for d in docs])
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not list orders: {exc}") from exc


def list_orders(db, view: str = "active") -> List[Dict[str, Any]]:
    """
    Staff board listing, newest first.
    view: 'active' (pending/preparing/ready) | 'all' | one of the order statuses.
    """
    q = _orders(db)
    if view == "active":
        q = q.where(filter=FieldFilter("status", "in", list(ACTIVE_STATUSES)))
    elif view in ORDER_STATUSES:
        q = q.where(filter=FieldFilter("status", "==", view))
    elif view != "all":
        raise ValidationError(f"Invalid view: {view!r}")

    try:
        docs = _stream_newest_first(q)
        return _attach_items(db, [_order_doc_to_out(d) for d in docs])
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not list orders: {exc}") from exc


def status_counts(db) -> Dict[str, int]:
    counts = {s: 0 for s in ACTIVE_STATUSES}
    try:
        for doc in _orders(db).where(filter=FieldFilter("status", "in", list(ACTIVE_STATUSES))).stream():
            status = (doc.to_dict() or {}).get("status")
            if status in counts:
                counts[status] += 1
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not count orders: {exc}") from exc
    return counts


# ──────────────────────────────────────────────────────────────────────────────
# Status transitions
# ──────────────────────────────────────────────────────────────────────────────

def set_status(db, order_id: str, new_status: str, actor: Optional[Principal] = None) -> Dict[str, Any]:
    """
    Writes `status` and `updated_at`. Any order may move to any valid status,
    including back out of delivered or cancelled; the last write wins.
    """
    if new_status not in ORDER_STATUSES:
        raise ValidationError(f"Invalid status: {new_status!r}")

    ref = _orders(db).document(order_id)
    try:
        snap = ref.get()
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not read order: {exc}") from exc
    if not snap.exists:
        raise NotFound("Order", order_id)

    current = (snap.to_dict() or {}).get("status")
    try:
        ref.update({"status": new_status, "updated_at": SERVER_TIMESTAMP})
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not update order status: {exc}", order_id=order_id) from exc

    logger.info(
        "Order %s status %s -> %s by %s",
        order_id, current, new_status, actor.uid if actor else "system",
    )
    return get_order(db, order_id)


# ──────────────────────────────────────────────────────────────────────────────
# Customers
# ──────────────────────────────────────────────────────────────────────────────

def ensure_customer_profile(db, principal: Principal) -> None:
    """Creates `customers/{uid}` from token data when it does not exist yet."""
    ref = db.collection(collection_name("customers")).document(principal.uid)
    try:
        if ref.get().exists:
            return
        ref.set({
            "name": principal.display_name or "",
            "email": principal.email or "",
            "created_at": SERVER_TIMESTAMP,
        })
    except GoogleAPICallError as exc:
        raise PlatformError(f"Could not create customer profile: {exc}") from exc
    logger.info("Customer profile created for %s", principal.uid)
