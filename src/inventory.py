"""In-memory stock ledger keyed by catalog entry id."""

from __future__ import annotations

import logging
from typing import Dict

from errors import InsufficientStock, InvalidQuantity
from metrics import STOCK_LEVEL

logger = logging.getLogger(__name__)


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class InventoryLedger:
    """Tracks available pieces per catalog entry id.

    Quantities never go negative.  ``reduce_stock`` re-checks availability
    itself, so callers cannot overdraw an entry even if they skip
    :meth:`is_available`.
    """

    def __init__(self) -> None:
        self._stock: Dict[str, int] = {}

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._stock

    def __len__(self) -> int:
        return len(self._stock)

    def add_stock(self, entry_id: str, quantity: int) -> int:
        """Create or increment the stock of ``entry_id``; returns the new level."""
        if not _is_count(quantity) or quantity <= 0:
            raise InvalidQuantity(entry_id=entry_id, quantity=quantity)
        level = self._stock.get(entry_id, 0) + quantity
        self._stock[entry_id] = level
        STOCK_LEVEL.set(level, product=entry_id)
        logger.debug("Stock added", extra={"extra": {"product": entry_id, "added": quantity, "level": level}})
        return level

    def quantity(self, entry_id: str) -> int:
        return self._stock.get(entry_id, 0)

    def is_available(self, entry_id: str, quantity: int) -> bool:
        return quantity <= self._stock.get(entry_id, 0)

    def reduce_stock(self, entry_id: str, quantity: int) -> int:
        """Take ``quantity`` pieces of ``entry_id`` out of stock; returns the new level.

        Raises:
            InvalidQuantity: if ``quantity`` is not a positive integer.
            InsufficientStock: if fewer than ``quantity`` pieces are held.
        """
        if not _is_count(quantity) or quantity <= 0:
            raise InvalidQuantity(entry_id=entry_id, quantity=quantity)
        current = self._stock.get(entry_id, 0)
        if current < quantity:
            raise InsufficientStock(
                f"Only {current} in stock for {entry_id}",
                entry_id=entry_id,
                requested=quantity,
                available=current,
            )
        level = current - quantity
        self._stock[entry_id] = level
        STOCK_LEVEL.set(level, product=entry_id)
        logger.debug("Stock reduced", extra={"extra": {"product": entry_id, "removed": quantity, "level": level}})
        return level

    def snapshot(self) -> Dict[str, int]:
        """Copy of the current stock levels, in insertion order."""
        return dict(self._stock)
