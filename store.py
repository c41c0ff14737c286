"""In-memory catalog, order ledger and the store that ties them together.

The catalog is read-only once seeded. The ledger is the only mutable state
and every access to it goes through a single lock. Orders handed out by the
ledger are copies, so callers cannot change ledger state behind the lock.
"""

import threading
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import structlog

from payments import DEFAULT_PAYMENT_DELAY, PaymentProcessor
from schemas import Order, OrderItem, OrderStatus, PaymentResponse, Product

logger = structlog.get_logger(__name__)


class NotFound(Exception):
    """No product or order matches the requested id."""


class ProductNotFound(NotFound):
    pass


class OrderNotFound(NotFound):
    pass


SEED_PRODUCTS = (
    Product(
        id=1,
        name="Wireless Headphones",
        description="High-quality wireless headphones with noise cancellation",
        price=99.99,
        image="https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=300&h=200&fit=crop",
        category="Electronics",
    ),
    Product(
        id=2,
        name="Smart Watch",
        description="Fitness tracking smartwatch with heart rate monitor",
        price=199.99,
        image="https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=300&h=200&fit=crop",
        category="Electronics",
    ),
    Product(
        id=3,
        name="Coffee Maker",
        description="Automatic drip coffee maker with programmable timer",
        price=79.99,
        image="https://images.unsplash.com/photo-1495474472287-4d71bcdd2085?w=300&h=200&fit=crop",
        category="Kitchen",
    ),
    Product(
        id=4,
        name="Running Shoes",
        description="Comfortable running shoes with breathable mesh",
        price=129.99,
        image="https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=300&h=200&fit=crop",
        category="Sports",
    ),
    Product(
        id=5,
        name="Laptop Backpack",
        description="Durable laptop backpack with multiple compartments",
        price=49.99,
        image="https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=300&h=200&fit=crop",
        category="Accessories",
    ),
)


class Catalog:
    """Fixed, ordered set of products."""

    def __init__(self, products: Iterable[Product]) -> None:
        self._products = tuple(products)
        self._by_id = {p.id: p for p in self._products}

    @classmethod
    def seeded(cls) -> "Catalog":
        return cls(SEED_PRODUCTS)

    def list_products(self) -> List[Product]:
        return list(self._products)

    def get_product(self, product_id: int) -> Product:
        try:
            return self._by_id[product_id]
        except KeyError:
            raise ProductNotFound(product_id) from None

    def price_of(self, product_id: int) -> float:
        """Unit price of a product, or 0 when the id is unknown.

        Unknown ids are not an error: an order line pointing at one simply
        adds nothing to the total.
        """
        product = self._by_id.get(product_id)
        if product is None:
            return 0
        return product.price


class OrderLedger:
    """Append-only list of orders with a sequential id counter."""

    def __init__(self, catalog: Catalog) -> None:
        self._lock = threading.Lock()
        self._catalog = catalog
        self._orders: List[Order] = []
        self._next_id = 1

    def _compute_total(self, items: List[OrderItem]) -> float:
        # Accumulate in submitted order so totals are reproducible.
        total = 0.0
        for item in items:
            total += self._catalog.price_of(item.product_id) * item.quantity
        return total

    def _find(self, order_id: int) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def create_order(self, items: Iterable[OrderItem]) -> Order:
        items = [item.model_copy() for item in items]
        with self._lock:
            order = Order(
                id=self._next_id,
                items=items,
                total=self._compute_total(items),
                status=OrderStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
            self._next_id += 1
            self._orders.append(order)
            created = order.model_copy(deep=True)
        logger.info("Order created", order_id=created.id, total=created.total, item_count=len(items))
        return created

    def list_orders(self) -> List[Order]:
        with self._lock:
            return [order.model_copy(deep=True) for order in self._orders]

    def get_order(self, order_id: int) -> Order:
        with self._lock:
            order = self._find(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            return order.model_copy(deep=True)

    def mark_paid(self, order_id: int) -> Order:
        """Move an order to paid. Paying an already paid order is allowed."""
        with self._lock:
            order = self._find(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            order.status = OrderStatus.PAID
            return order.model_copy(deep=True)

    def reset(self, catalog: Optional[Catalog] = None) -> None:
        with self._lock:
            if catalog is not None:
                self._catalog = catalog
            self._orders = []
            self._next_id = 1


class Store:
    """Process-lifetime state shared by the request handlers."""

    def __init__(self, payment_delay: float = DEFAULT_PAYMENT_DELAY) -> None:
        self.catalog = Catalog.seeded()
        self.ledger = OrderLedger(self.catalog)
        self.processor = PaymentProcessor(delay=payment_delay)

    async def process_payment(self, order_id: int, amount: float) -> PaymentResponse:
        """Charge an order and mark it paid.

        The claimed amount is not compared with the order total. The
        simulated gateway delay runs without holding the ledger lock; if the
        caller is cancelled during it the order keeps its status.
        """
        order = self.ledger.get_order(order_id)
        logger.info("Payment started", order_id=order.id, amount=amount, total=order.total)

        result = await self.processor.charge(order.id, amount)

        order = self.ledger.mark_paid(order.id)
        logger.info("Payment completed", order_id=order.id)
        return PaymentResponse(success=result.success, message=result.message, order_id=order.id)

    def reset(self) -> None:
        """Restore the seed catalog and empty the ledger. Meant for tests."""
        self.catalog = Catalog.seeded()
        self.ledger.reset(self.catalog)
