"""
restaurant/schemas/principal.py
Roles and the Principal model.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field

Role = Literal["customer", "staff", "admin"]

ROLES = ("customer", "staff", "admin")


class Principal(BaseModel):
    uid: str = Field(..., description="Firebase UID")
    role: Role = Field("customer", description="customer | staff | admin")
    email: Optional[str] = Field(None, description="E-mail (if any)")
    display_name: Optional[str] = Field(None, description="Display name (if any)")

    @property
    def is_staff(self) -> bool:
        return self.role in ("staff", "admin")
