"""
# `restaurant/schemas/menu.py` - Menu schemas

## Categories
| Field       | Type  | Required | Notes |
|-------------|-------|----------|-------|
| name        | `str` | yes      | non-empty |
| description | `str` | no       | |

## Menu items
| Field        | Type    | Required | Notes |
|--------------|---------|----------|-------|
| name         | `str`   | yes      | non-empty |
| description  | `str`   | no       | |
| price        | `float` | yes      | > 0, stored with 2 decimals |
| category_id  | `str`   | yes      | must reference an existing category |
| is_available | `bool`  | no       | default true; unavailable items cannot be added to a cart |
| image_url    | `str`   | no       | plain URL, uploads are not handled here |

Update models are partial: only the fields sent are written.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Category name")
    description: Optional[str] = Field(None, description="Description (optional)")


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class CategoryOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Item name")
    description: Optional[str] = None
    price: float = Field(..., gt=0, description="Unit price")
    category_id: str = Field(..., min_length=1)
    is_available: bool = True
    image_url: Optional[str] = None


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    category_id: Optional[str] = None
    is_available: Optional[bool] = None
    image_url: Optional[str] = None


class MenuItemOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    category_id: Optional[str] = None
    is_available: bool = True
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
