# src/shop.py
"""
Shop coordinator: runs purchase transactions across the catalog, the
inventory ledger, the payment gateway and the order log.

A purchase moves through

    SELECTING -> QUOTING -> AWAITING_CONFIRMATION -> CHARGING -> COMMITTED
                                                             \\-> ABORTED

and may abort from any non-terminal state.  Stock is reduced and the order
is recorded only after the gateway approves the charge, and both happen
together: if recording fails the stock is put back and the charge refunded.

Failures never escape as exceptions from the public methods; they come back
as result objects carrying a :class:`errors.FailureReason`.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from catalog import Catalog, CatalogEntry, default_catalog
from config import ShopSettings
from errors import (
    FailureReason,
    IllegalTransition,
    InsufficientStock,
    InvalidQuantity,
    PaymentDeclined,
    ShopError,
    UnknownProduct,
)
from inventory import InventoryLedger
from metrics import (
    ORDERS_COMMITTED_TOTAL,
    PURCHASE_ABORTED_TOTAL,
    PURCHASE_DURATION_SECONDS,
    REVENUE_TOTAL,
)
from order_log import Order, OrderLog
from payment_service import PaymentGateway, SimulatedPaymentGateway, TimeoutPaymentGateway
from pricing import PricingResult, compute_price, validate_quantity

logger = logging.getLogger(__name__)


class PurchaseState(str, Enum):
    SELECTING = "Selecting"
    QUOTING = "Quoting"
    AWAITING_CONFIRMATION = "AwaitingConfirmation"
    CHARGING = "Charging"
    COMMITTED = "Committed"
    ABORTED = "Aborted"


TERMINAL_STATES = (PurchaseState.COMMITTED, PurchaseState.ABORTED)


@dataclass(frozen=True)
class CatalogListing:
    """One line of the product menu."""
    index: int
    display_name: str
    formatted_info: str


@dataclass(frozen=True)
class QuoteResult:
    success: bool
    price: Optional[Decimal] = None
    pricing: Optional[PricingResult] = None
    failure_reason: Optional[FailureReason] = None
    message: str = ""


@dataclass(frozen=True)
class OrderResult:
    success: bool
    order: Optional[Order] = None
    failure_reason: Optional[FailureReason] = None
    message: str = ""
    transaction_id: str = ""


class PurchaseTransaction:
    """A single purchase attempt, driven one step at a time.

    Obtain one from :meth:`ShopCoordinator.begin`.  Each step returns the
    resulting :class:`PurchaseState`; calling a step out of order raises
    :class:`errors.IllegalTransition`.
    """

    def __init__(self, shop: "ShopCoordinator", transaction_id: Optional[str] = None) -> None:
        self._shop = shop
        self.transaction_id = transaction_id or uuid.uuid4().hex[:12]
        self.state = PurchaseState.SELECTING
        self.history: List[PurchaseState] = [PurchaseState.SELECTING]
        self.entry: Optional[CatalogEntry] = None
        self.quantity: Optional[int] = None
        self.pricing: Optional[PricingResult] = None
        self.order: Optional[Order] = None
        self.failure_reason: Optional[FailureReason] = None
        self.message = ""
        self._started = time.perf_counter()

    @property
    def price(self) -> Optional[Decimal]:
        return self.pricing.total if self.pricing else None

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    # ---- state helpers ----

    def _require(self, expected: PurchaseState, step: str) -> None:
        if self.state is not expected:
            raise IllegalTransition(
                f"Cannot {step} in state {self.state.value} (expected {expected.value})"
            )

    def _move(self, state: PurchaseState) -> PurchaseState:
        self.state = state
        self.history.append(state)
        return state

    def _log_extra(self, **more) -> dict:
        data = {
            "product": self.entry.id if self.entry else None,
            "quantity": self.quantity,
            "state": self.state.value,
        }
        data.update(more)
        return {"transaction_id": self.transaction_id, "extra": data}

    def _abort(self, error: ShopError) -> PurchaseState:
        self.failure_reason = error.reason
        self.message = error.message
        self._move(PurchaseState.ABORTED)
        PURCHASE_ABORTED_TOTAL.inc(reason=error.reason.value)
        PURCHASE_DURATION_SECONDS.observe(time.perf_counter() - self._started, outcome="aborted")
        logger.info("Purchase aborted", extra=self._log_extra(reason=error.reason.value, detail=error.message))
        return self.state

    # ---- steps ----

    def select(self, entry_id: Optional[str]) -> PurchaseState:
        self._require(PurchaseState.SELECTING, "select a product")
        entry = self._shop.catalog.get(entry_id) if entry_id is not None else None
        if entry is None:
            return self._abort(UnknownProduct(entry_id=entry_id))
        self.entry = entry
        return self._move(PurchaseState.QUOTING)

    def request_quantity(self, quantity: int, discount_percent=0, tax_percent=0) -> PurchaseState:
        self._require(PurchaseState.QUOTING, "request a quantity")
        try:
            self.pricing = self._shop.price_for(self.entry, quantity, discount_percent, tax_percent)
        except ShopError as e:
            return self._abort(e)
        self.quantity = quantity
        return self._move(PurchaseState.AWAITING_CONFIRMATION)

    def confirm(self, confirmed: bool) -> PurchaseState:
        """Answer the payment prompt; a yes goes straight on to charging."""
        self._require(PurchaseState.AWAITING_CONFIRMATION, "confirm")
        if confirmed is not True:
            return self._abort(ShopError(reason=FailureReason.USER_CANCELLED))
        self._move(PurchaseState.CHARGING)
        return self._charge()

    def _charge(self) -> PurchaseState:
        shop = self._shop
        entry, quantity, total = self.entry, self.quantity, self.pricing.total
        with shop.lock:
            if not shop.inventory.is_available(entry.id, quantity):
                return self._abort(InsufficientStock(entry_id=entry.id, requested=quantity))
            try:
                approved = shop.payment_gateway.charge(total)
            except Exception:
                logger.exception("Payment gateway raised", extra=self._log_extra(amount=f"{total:.2f}"))
                approved = False
            if not approved:
                return self._abort(PaymentDeclined(entry_id=entry.id, amount=str(total)))
            try:
                self.order = shop.record_sale(entry, quantity, total)
            except Exception as e:
                logger.error("Commit failed after payment; refunding", extra=self._log_extra(detail=str(e)))
                try:
                    shop.payment_gateway.refund(total)
                except Exception:
                    logger.exception("Refund failed", extra=self._log_extra(amount=f"{total:.2f}"))
                if isinstance(e, ShopError):
                    return self._abort(e)
                return self._abort(PaymentDeclined(str(e)))

        self._move(PurchaseState.COMMITTED)
        ORDERS_COMMITTED_TOTAL.inc()
        REVENUE_TOTAL.inc(float(total))
        PURCHASE_DURATION_SECONDS.observe(time.perf_counter() - self._started, outcome="committed")
        logger.info(
            "Purchase committed",
            extra=self._log_extra(total=f"{total:.2f}", sequence_number=self.order.sequence_number),
        )
        return self.state

    def result(self) -> OrderResult:
        if not self.done:
            raise IllegalTransition(f"Transaction still in state {self.state.value}")
        return OrderResult(
            success=self.state is PurchaseState.COMMITTED,
            order=self.order,
            failure_reason=self.failure_reason,
            message=self.message,
            transaction_id=self.transaction_id,
        )


class ShopCoordinator:
    """
    Business logic for the chocolate shop.  Exposes the catalog listing,
    quotes, purchases, and read-only views of stock and order history.
    Collaborators are injected so tests can substitute fakes.
    """

    def __init__(
        self,
        catalog: Catalog,
        inventory: InventoryLedger,
        payment_gateway: PaymentGateway,
        order_log: OrderLog,
    ) -> None:
        self.catalog = catalog
        self.inventory = inventory
        self.payment_gateway = payment_gateway
        self.order_log = order_log
        # Spans the availability re-check, charge and commit of a transaction
        self.lock = threading.RLock()

    @classmethod
    def create_default(cls, settings: Optional[ShopSettings] = None) -> "ShopCoordinator":
        """Build the shop with the default catalog, each product stocked."""
        settings = settings or ShopSettings()
        catalog = default_catalog()
        inventory = InventoryLedger()
        if settings.initial_stock > 0:
            for entry in catalog:
                inventory.add_stock(entry.id, settings.initial_stock)
        gateway: PaymentGateway = SimulatedPaymentGateway(delay_seconds=settings.payment_delay_seconds)
        if settings.payment_timeout_seconds is not None:
            gateway = TimeoutPaymentGateway(gateway, settings.payment_timeout_seconds)
        return cls(catalog, inventory, gateway, OrderLog())

    # ---- internals shared by quotes and transactions ----

    def price_for(self, entry: CatalogEntry, quantity: int, discount_percent=0, tax_percent=0) -> PricingResult:
        """Validate the quantity against stock, then price it.

        Raises:
            InvalidQuantity, InsufficientStock, InvalidPercentage
        """
        validate_quantity(quantity)
        if not self.inventory.is_available(entry.id, quantity):
            available = self.inventory.quantity(entry.id)
            raise InsufficientStock(
                f"Sorry, we only have {available} pieces of {entry.display_name} in stock.",
                entry_id=entry.id,
                requested=quantity,
                available=available,
            )
        return compute_price(entry, quantity, discount_percent, tax_percent)

    def record_sale(self, entry: CatalogEntry, quantity: int, total: Decimal) -> Order:
        """Reduce stock and append the order as one step."""
        with self.lock:
            self.inventory.reduce_stock(entry.id, quantity)
            try:
                return self.order_log.append(
                    Order(
                        catalog_entry_id=entry.id,
                        display_name=entry.display_name,
                        quantity=quantity,
                        total_charged=total,
                    )
                )
            except Exception:
                self.inventory.add_stock(entry.id, quantity)
                raise

    # ---- public API ----

    def begin(self) -> PurchaseTransaction:
        return PurchaseTransaction(self)

    def entry_at(self, index: int) -> Optional[CatalogEntry]:
        return self.catalog.get_by_index(index)

    def list_catalog(self) -> List[CatalogListing]:
        return [
            CatalogListing(index=i, display_name=entry.display_name, formatted_info=entry.describe())
            for i, entry in enumerate(self.catalog, start=1)
        ]

    def quote(self, index: int, quantity: int, discount_percent=0, tax_percent=0) -> QuoteResult:
        """Price ``quantity`` pieces of the product at ``index`` without buying."""
        entry = self.entry_at(index)
        try:
            if entry is None:
                raise UnknownProduct(f"No product at position {index}", index=index)
            with self.lock:
                pricing = self.price_for(entry, quantity, discount_percent, tax_percent)
        except ShopError as e:
            return QuoteResult(success=False, failure_reason=e.reason, message=e.message)
        return QuoteResult(success=True, price=pricing.total, pricing=pricing)

    def purchase(self, entry_id: Optional[str], quantity: int, confirmed: bool,
                 discount_percent=0, tax_percent=0) -> OrderResult:
        """Run a whole transaction for the product with ``entry_id``."""
        with self.lock:
            tx = self.begin()
            if tx.select(entry_id) is PurchaseState.ABORTED:
                return tx.result()
            if tx.request_quantity(quantity, discount_percent, tax_percent) is PurchaseState.ABORTED:
                return tx.result()
            tx.confirm(confirmed)
            return tx.result()

    def confirm_and_charge(self, index: int, quantity: int, confirmed: bool,
                           discount_percent=0, tax_percent=0) -> OrderResult:
        entry = self.entry_at(index)
        return self.purchase(entry.id if entry else None, quantity, confirmed, discount_percent, tax_percent)

    def restock(self, index: int, quantity: int) -> Tuple[bool, str]:
        """Admin: add ``quantity`` pieces of the product at ``index``."""
        entry = self.entry_at(index)
        if entry is None:
            return False, "Product not found."
        try:
            with self.lock:
                level = self.inventory.add_stock(entry.id, quantity)
        except InvalidQuantity as e:
            return False, e.message
        logger.info("Restocked", extra={"extra": {"product": entry.id, "added": quantity, "level": level}})
        return True, f"{entry.display_name} now has {level} pieces in stock."

    def inventory_snapshot(self) -> Dict[str, int]:
        return self.inventory.snapshot()

    def order_history(self) -> Tuple[Order, ...]:
        return self.order_log.list_all()
