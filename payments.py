"""Simulated payment processor.

Stands in for a real gateway call. It never talks to anything external and
every charge succeeds after a fixed delay. The delay is awaited, so other
requests keep being served while a payment is in flight.
"""

import asyncio
from dataclasses import dataclass

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_PAYMENT_DELAY = 1.0


@dataclass(frozen=True)
class ChargeResult:
    """Result of a charge attempt."""

    success: bool
    message: str


class PaymentProcessor:
    """Always-succeeding fake gateway with a configurable delay in seconds."""

    def __init__(self, delay: float = DEFAULT_PAYMENT_DELAY) -> None:
        self.delay = delay

    async def charge(self, order_id: int, amount: float) -> ChargeResult:
        logger.debug("Charging order", order_id=order_id, amount=amount, delay=self.delay)
        await asyncio.sleep(self.delay)
        return ChargeResult(success=True, message="Payment processed successfully")
