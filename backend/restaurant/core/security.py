"""
restaurant/core/security.py - role based authorization helpers.

Authentication itself happens in `core.auth.get_principal` (Firebase ID token).
The dependencies below only check the role claim carried by the Principal:

- `require_customer`: cart and checkout endpoints (only customers order)
- `require_staff`: staff board; admins are staff too
- `require_admin`: menu management
"""
from fastapi import Depends, HTTPException, status

from restaurant.core.auth import get_principal
from restaurant.schemas.principal import Principal


def require_customer(principal: Principal = Depends(get_principal)) -> Principal:
    if principal.role != "customer":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only customers can use the cart and place orders."
        )
    return principal


def require_staff(principal: Principal = Depends(get_principal)) -> Principal:
    """Accepts staff and admin users."""
    if not principal.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff privilege required."
        )
    return principal


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Only admin users."""
    if principal.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privilege required."
        )
    return principal
