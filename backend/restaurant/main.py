"""
# `restaurant/main.py` - application entry point

The FastAPI app: CORS, routers, and the translation of domain errors into HTTP.

## Routers
**Public / customer:**
- `/menu`
- `/cart`
- `/orders`

**Staff (prefix `/staff`):**
- `/staff/orders`

**Admin (prefix `/admin`):**
- `/admin/categories`
- `/admin/menu-items`

## Errors
- `ValidationError` -> 422
- `NotFound` -> 404
- `PlatformError` -> 502 (Firestore rejected or failed the call)
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from restaurant.config import settings
from restaurant.core.errors import PlatformError, RestaurantError
from restaurant.routers import cart, menu, orders

logger = logging.getLogger("restaurant")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Restaurant Ordering API",
        description="Menu, cart, checkout and order tracking backed by Firebase.",
        version="1.0.0",
        debug=settings.debug,
        redirect_slashes=False,
    )

    # Configure CORS (allow front-end domain or all origins as specified)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RestaurantError)
    async def _restaurant_error(request: Request, exc: RestaurantError):
        if isinstance(exc, PlatformError):
            logger.error(
                "Platform error on %s %s (step=%s order=%s): %s",
                request.method, request.url.path, exc.step, exc.order_id, exc.message,
            )
        body = {"detail": exc.message}
        if isinstance(exc, PlatformError) and exc.order_id:
            body["order_id"] = exc.order_id
        return JSONResponse(status_code=exc.status_code, content=body)

    app.include_router(menu.router)
    app.include_router(cart.router)
    app.include_router(orders.router)
    app.include_router(orders.staff_router)
    app.include_router(menu.admin_router, prefix="/admin")

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()

# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("restaurant.main:app", host="0.0.0.0", port=8000, reload=True)
