"""Failure reasons and the exception family raised by the shop core.

Leaf components (pricing, inventory) raise :class:`ShopError` subclasses.
The coordinator in :mod:`shop` catches them and turns them into result
values, so callers of the public shop API never see these exceptions.

Usage:
    try:
        pricing.price(entry, 0)
    except ShopError as e:
        if e.reason is FailureReason.INVALID_QUANTITY:
            print(e.message)
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class FailureReason(str, Enum):
    """Why a purchase transaction was aborted."""

    UNKNOWN_PRODUCT = "UnknownProduct"
    INVALID_QUANTITY = "InvalidQuantity"
    INVALID_PERCENTAGE = "InvalidPercentage"
    INSUFFICIENT_STOCK = "InsufficientStock"
    USER_CANCELLED = "UserCancelled"
    PAYMENT_DECLINED = "PaymentDeclined"


ERROR_MESSAGES = {
    FailureReason.UNKNOWN_PRODUCT: "Product not found",
    FailureReason.INVALID_QUANTITY: "Quantity must be a whole number of at least 1",
    FailureReason.INVALID_PERCENTAGE: "Percentage must be between 0 and 100",
    FailureReason.INSUFFICIENT_STOCK: "Not enough stock",
    FailureReason.USER_CANCELLED: "Order cancelled",
    FailureReason.PAYMENT_DECLINED: "Payment failed",
}


class ShopError(Exception):
    """Structured exception carrying a :class:`FailureReason` and context data."""

    reason: FailureReason = FailureReason.PAYMENT_DECLINED

    def __init__(self, message: str = "", reason: FailureReason | None = None, **data: Any) -> None:
        if reason is not None:
            self.reason = reason
        self.message = message or ERROR_MESSAGES[self.reason]
        self.data = data
        super().__init__(f"[{self.reason.value}] {self.message}")

    def as_dict(self) -> dict:
        return {
            "reason": self.reason.value,
            "message": self.message,
            "data": self.data,
        }


class UnknownProduct(ShopError):
    reason = FailureReason.UNKNOWN_PRODUCT


class InvalidQuantity(ShopError):
    reason = FailureReason.INVALID_QUANTITY


class InvalidPercentage(ShopError):
    reason = FailureReason.INVALID_PERCENTAGE


class InsufficientStock(ShopError):
    reason = FailureReason.INSUFFICIENT_STOCK


class PaymentDeclined(ShopError):
    reason = FailureReason.PAYMENT_DECLINED


class IllegalTransition(RuntimeError):
    """A purchase transaction step was called in the wrong state."""
