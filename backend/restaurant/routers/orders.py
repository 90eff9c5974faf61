from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from restaurant.config import get_db
from restaurant.core.auth import get_principal
from restaurant.core.security import require_customer, require_staff
from restaurant.schemas.order import CheckoutBody, CheckoutOut, OrderOut, StatusBody, StatusCounts
from restaurant.schemas.principal import Principal
from restaurant.services import orders as order_service
from restaurant.services.cart import CartStore

router = APIRouter(prefix="/orders", tags=["Orders"])
staff_router = APIRouter(prefix="/staff/orders", tags=["Staff Orders"], dependencies=[Depends(require_staff)])


@router.post("", response_model=CheckoutOut, status_code=status.HTTP_201_CREATED)
def place_order(body: CheckoutBody, principal: Principal = Depends(require_customer), db=Depends(get_db)):
    """
    CART -> ORDER
    - Uses the customer's stored cart; the body carries order type, table, notes, payment method.
    - Writes order, order items and payment in that order; the cart is cleared afterwards.
    """
    store = CartStore(db)
    cart = store.load(principal.uid)
    order_service.validate_checkout(principal, cart, body)
    order_service.ensure_customer_profile(db, principal)
    return order_service.submit_order(db, principal, cart, body, store=store)


@router.get("/my", response_model=List[OrderOut])
def list_my_orders(principal: Principal = Depends(require_customer), db=Depends(get_db)):
    return order_service.list_customer_orders(db, principal.uid)


@router.get("/{order_id}", response_model=OrderOut)
def get_order_detail(order_id: str, principal: Principal = Depends(get_principal), db=Depends(get_db)):
    """Customers see their own orders; staff and admin see all of them."""
    order = order_service.get_order(db, order_id)
    if order["customer_id"] != principal.uid and not principal.is_staff:
        raise HTTPException(status_code=403, detail="Not allowed to view this order.")
    return order


@staff_router.get("", response_model=List[OrderOut])
def staff_list_orders(
    view: str = Query("active", description="active | all | pending | preparing | ready | delivered | cancelled"),
    db=Depends(get_db),
):
    return order_service.list_orders(db, view)


@staff_router.get("/counts", response_model=StatusCounts)
def staff_order_counts(db=Depends(get_db)):
    return order_service.status_counts(db)


@staff_router.patch("/{order_id}/status", response_model=OrderOut)
def staff_set_status(
    order_id: str,
    body: StatusBody,
    principal: Principal = Depends(require_staff),
    db=Depends(get_db),
):
    return order_service.set_status(db, order_id, body.status, actor=principal)
