# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from storefront.api.routers import cart, checkout, health, orders
from storefront.data.database import init_db
from storefront.domain.errors import (
    CartConflict,
    CheckoutFault,
    CheckoutInProgress,
    EmptyCart,
    Forbidden,
    InsufficientStock,
    InvalidPaymentMethod,
    InvalidShippingService,
    NotFound,
    StorefrontError,
    ValidationFailed,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Map exception types to HTTP status codes
ERROR_STATUS_CODES: dict[type, int] = {
    ValidationFailed: 422,
    InvalidShippingService: 422,
    InvalidPaymentMethod: 422,
    InsufficientStock: 409,
    EmptyCart: 400,
    Forbidden: 403,
    NotFound: 404,
    CheckoutInProgress: 409,
    CartConflict: 409,
    CheckoutFault: 500,
}


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Map StorefrontError subclasses to HTTP responses."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__, **exc.context},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Checkout Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(StorefrontError, storefront_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(cart.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
