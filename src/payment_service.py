# payment_service.py
"""
Payment gateway simulation used by the chocolate shop.

- ``PaymentGateway``: the contract the shop depends on (``charge`` / ``refund``).
- ``SimulatedPaymentGateway``: blocks for a short delay and always approves.
- ``TimeoutPaymentGateway``: wraps another gateway and reports a charge that
  runs too long (or blows up) as declined.

NOTE: This is *mock* code, no real gateways are called.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from decimal import Decimal
from typing import List

logger = logging.getLogger(__name__)


class PaymentGateway:
    """Abstract base for payment gateways.

    ``charge`` returns True when the amount was captured.  Callers must treat
    False as a normal outcome, not an error.
    """

    def charge(self, amount: Decimal) -> bool:
        raise NotImplementedError

    def refund(self, amount: Decimal) -> bool:
        """Give back a previously captured amount (compensating action)."""
        raise NotImplementedError


class SimulatedPaymentGateway(PaymentGateway):
    """Approve every non-negative amount after ``delay_seconds``."""

    def __init__(self, delay_seconds: float = 1.0) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")
        self.delay_seconds = delay_seconds
        self.charges: List[Decimal] = []
        self.refunds: List[Decimal] = []

    def charge(self, amount: Decimal) -> bool:
        if amount < 0:
            logger.warning("Rejected negative charge", extra={"extra": {"amount": str(amount)}})
            return False
        logger.info("Processing payment", extra={"extra": {"amount": f"{amount:.2f}"}})
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        self.charges.append(amount)
        logger.info("Payment successful", extra={"extra": {"amount": f"{amount:.2f}"}})
        return True

    def refund(self, amount: Decimal) -> bool:
        # In real life: call the gateway refund endpoint; idempotently handle repeats.
        self.refunds.append(amount)
        logger.info("Payment refunded", extra={"extra": {"amount": f"{amount:.2f}"}})
        return True


class TimeoutPaymentGateway(PaymentGateway):
    """Bound the time spent waiting on ``inner.charge``.

    The inner call runs on a worker thread.  If it does not finish within
    ``timeout_seconds`` the charge is reported as declined; the worker is
    left to finish on its own, and if it does capture the amount after all,
    the amount is refunded.
    """

    def __init__(self, inner: PaymentGateway, timeout_seconds: float) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.inner = inner
        self.timeout_seconds = timeout_seconds

    def charge(self, amount: Decimal) -> bool:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="payment")
        try:
            future = executor.submit(self.inner.charge, amount)
            try:
                return bool(future.result(timeout=self.timeout_seconds))
            except FutureTimeout:
                logger.warning(
                    "Payment timed out",
                    extra={"extra": {"amount": f"{amount:.2f}", "timeout_seconds": self.timeout_seconds}},
                )
                future.add_done_callback(lambda f: self._refund_late_capture(f, amount))
                return False
            except Exception:
                logger.exception("Payment gateway error", extra={"extra": {"amount": f"{amount:.2f}"}})
                return False
        finally:
            executor.shutdown(wait=False)

    def _refund_late_capture(self, future, amount: Decimal) -> None:
        # Already reported as declined, so anything captured now goes back
        if future.cancelled() or future.exception() is not None or not future.result():
            return
        try:
            refunded = self.inner.refund(amount)
        except Exception:
            logger.exception("Refund of late capture failed", extra={"extra": {"amount": f"{amount:.2f}"}})
            return
        logger.warning(
            "Refunded late capture",
            extra={"extra": {"amount": f"{amount:.2f}", "refunded": refunded}},
        )

    def refund(self, amount: Decimal) -> bool:
        return self.inner.refund(amount)
