"""Append-only record of completed purchases."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Order:
    """A completed purchase.

    ``sequence_number`` is None until the order is appended to an
    :class:`OrderLog`, which assigns it.
    """
    catalog_entry_id: str
    display_name: str
    quantity: int
    total_charged: Decimal
    sequence_number: Optional[int] = None

    def summary(self) -> str:
        return "\n".join([
            "Order Summary:",
            f"Chocolate: {self.display_name}",
            f"Quantity: {self.quantity}",
            f"Total Price: ${self.total_charged:.2f}",
        ])


class OrderLog:
    """Orders in the sequence they were appended.  Nothing is ever removed."""

    def __init__(self) -> None:
        self._orders: List[Order] = []

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(tuple(self._orders))

    def append(self, order: Order) -> Order:
        """Number ``order`` and store it; returns the stored copy."""
        if order.sequence_number is not None:
            raise ValueError(f"Order already recorded as #{order.sequence_number}")
        if isinstance(order.quantity, bool) or not isinstance(order.quantity, int) or order.quantity <= 0:
            raise ValueError(f"Order quantity must be positive (got {order.quantity!r})")
        if order.total_charged < 0:
            raise ValueError(f"Order total must not be negative (got {order.total_charged})")
        stored = dataclasses.replace(order, sequence_number=len(self._orders) + 1)
        self._orders.append(stored)
        return stored

    def list_all(self) -> Tuple[Order, ...]:
        """All orders, oldest first."""
        return tuple(self._orders)
