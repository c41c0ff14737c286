"""Demo store API.

Products come from a fixed in-memory catalog, orders live in an in-memory
ledger and payments are simulated.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8080
    python main.py
"""

import asyncio
import re
from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings
from logging_config import configure_logging
from schemas import Order, OrderCreate, PaymentRequest, PaymentResponse, Product
from store import OrderNotFound, ProductNotFound, Store

logger = structlog.get_logger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
DISCONNECT_POLL_INTERVAL = 0.1

# Decimal integer with optional sign, ASCII digits only.
PRODUCT_ID_RE = re.compile(r"[+-]?[0-9]+")

router = APIRouter()


# ----------------------
# Helpers
# ----------------------
def get_store(request: Request) -> Store:
    return request.app.state.store


async def plain_http_error(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def invalid_body(request: Request, exc: RequestValidationError):
    return PlainTextResponse("Invalid request body", status_code=400)


# ----------------------
# Routes
# ----------------------
@router.get("/")
def read_root():
    return {"message": "Store backend running"}


# Products
@router.get("/api/products", response_model=List[Product])
def list_products(store: Store = Depends(get_store)):
    return store.catalog.list_products()


@router.get("/api/products/{product_id}", response_model=Product)
def get_product(product_id: str, store: Store = Depends(get_store)):
    if not PRODUCT_ID_RE.fullmatch(product_id):
        raise HTTPException(status_code=400, detail="Invalid product ID")
    try:
        return store.catalog.get_product(int(product_id))
    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")


# Orders
@router.post("/api/orders", response_model=Order)
def create_order(payload: OrderCreate, store: Store = Depends(get_store)):
    return store.ledger.create_order(payload.items)


@router.get("/api/orders", response_model=List[Order])
def list_orders(store: Store = Depends(get_store)):
    return store.ledger.list_orders()


# Payments
async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


@router.post("/api/payment", response_model=PaymentResponse)
async def pay_order(payload: PaymentRequest, request: Request, store: Store = Depends(get_store)):
    payment = asyncio.ensure_future(store.process_payment(payload.order_id, payload.amount))
    disconnect = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait({payment, disconnect}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        disconnect.cancel()
        if not payment.done():
            payment.cancel()

    if payment not in done:
        logger.info("Payment abandoned by client", order_id=payload.order_id)
        raise HTTPException(status_code=499, detail="Client closed request")
    try:
        return payment.result()
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    settings = app.state.settings
    logger.info("Server starting", host=settings.host, port=settings.port)
    yield


def create_app(store: Optional[Store] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an explicit store.

    A new seeded store is created when none is given. Logging is configured
    when the server starts, not when the app is built.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(title="Demo Store API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store if store is not None else Store(payment_delay=settings.payment_delay)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, plain_http_error)
    app.add_exception_handler(RequestValidationError, invalid_body)

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
