# restaurant/schemas/order.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

OrderType = Literal["dine-in", "takeaway", "delivery"]
OrderStatus = Literal["pending", "preparing", "ready", "delivered", "cancelled"]
PaymentMethod = Literal["card", "cash", "mobile"]

ORDER_TYPES = ("dine-in", "takeaway", "delivery")
ORDER_STATUSES = ("pending", "preparing", "ready", "delivered", "cancelled")
PAYMENT_METHODS = ("card", "cash", "mobile")

INITIAL_STATUS = "pending"
ACTIVE_STATUSES = ("pending", "preparing", "ready")


# (Input) checkout payload; items come from the stored cart
class CheckoutBody(BaseModel):
    order_type: str = Field(..., description="dine-in | takeaway | delivery")
    table_number: Optional[int] = Field(None, description="Required for dine-in orders")
    notes: Optional[str] = Field(None, max_length=1000)
    payment_method: str = Field("card", description="card | cash | mobile")


class StatusBody(BaseModel):
    status: str = Field(..., description="pending | preparing | ready | delivered | cancelled")


class OrderItemOut(BaseModel):
    id: str
    order_id: str
    item_id: Optional[str] = None
    item_name: str
    quantity: int
    unit_price: float
    subtotal: float
    subtotal_cents: Optional[int] = None
    special_instructions: Optional[str] = None


class PaymentOut(BaseModel):
    id: str
    order_id: str
    amount: float
    amount_cents: Optional[int] = None
    method: PaymentMethod
    status: str = "completed"
    paid_at: Optional[datetime] = None


class OrderOut(BaseModel):
    id: str
    customer_id: str
    order_type: OrderType
    table_number: Optional[int] = None
    total_amount: float
    total_cents: Optional[int] = None
    notes: Optional[str] = None
    status: OrderStatus
    currency: str = "USD"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut] = Field(default_factory=list)


class CheckoutOut(BaseModel):
    order: OrderOut
    items: List[OrderItemOut]
    payment: PaymentOut


class StatusCounts(BaseModel):
    pending: int = 0
    preparing: int = 0
    ready: int = 0
