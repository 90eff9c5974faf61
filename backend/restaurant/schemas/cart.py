"""
restaurant/schemas/cart.py - Pydantic models for the Cart endpoints.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class AddItemBody(BaseModel):
    """Add to cart by menu item ID; name and price come from the menu."""
    menu_item_id: str = Field(..., description="Menu item ID (the same 'id' you see in /menu/items).")
    quantity: int = Field(1, ge=1, le=1000, description="Quantity (>=1).")
    special_instructions: Optional[str] = Field(None, max_length=500)

    @field_validator("menu_item_id")
    @classmethod
    def _clean_id(cls, v: str) -> str:
        v = (v or "").strip()
        for ch in ("\u200b", "\u200c", "\u200d", "\ufeff", "\xa0"):
            v = v.replace(ch, "")
        if not v:
            raise ValueError("menu_item_id cannot be empty")
        return v


class UpdateQuantityBody(BaseModel):
    # 0 or negative removes the line
    quantity: int


class CartItemOut(BaseModel):
    id: str
    name: str
    unit_price: float
    quantity: int
    subtotal: float
    special_instructions: Optional[str] = None


class CartOut(BaseModel):
    user_id: str
    items: List[CartItemOut] = Field(default_factory=list)
    item_count: int = 0
    total_amount: float = 0.0
    currency: str = "USD"
