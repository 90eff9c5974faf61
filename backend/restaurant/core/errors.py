# restaurant/core/errors.py
"""
Domain exceptions raised by the service layer.
main.py translates them into HTTP responses; routers do not catch them.
"""
from typing import Optional


class RestaurantError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RestaurantError):
    """Missing required field, bad enumerated value, non-positive quantity/price."""
    status_code = 422


class NotFound(RestaurantError):
    status_code = 404

    def __init__(self, kind: str, ident: str):
        super().__init__(f"{kind} not found: {ident}")
        self.kind = kind
        self.ident = ident


class PlatformError(RestaurantError):
    """The hosted data platform rejected or failed a read/write."""
    status_code = 502

    def __init__(self, message: str, step: Optional[str] = None, order_id: Optional[str] = None):
        super().__init__(message)
        self.step = step
        self.order_id = order_id
