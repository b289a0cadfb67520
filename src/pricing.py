"""Price computation for catalog entries.

The calculation runs in two stages:

1. :func:`base_price` applies the rule owned by the entry's variant kind
   (bulk discount for eligible Plain entries, premium surcharge and edition
   discount for LimitedEdition entries, nothing for Flavored entries).
2. A shared discount-then-tax stage applies identically to every kind.

All arithmetic uses :class:`decimal.Decimal`; the final total is rounded
half-up to whole cents.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from catalog import CatalogEntry, Flavored, LimitedEdition, Plain, to_decimal
from errors import InvalidPercentage, InvalidQuantity

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PricingResult:
    """Every stage of one price calculation."""
    subtotal: Decimal
    base_price: Decimal
    after_discount: Decimal
    after_tax: Decimal

    @property
    def total(self) -> Decimal:
        return round_money(self.after_tax)


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(quantity=quantity)
    return quantity


def validate_percentage(value, name: str = "percentage") -> Decimal:
    try:
        pct = to_decimal(value)
    except ValueError:
        raise InvalidPercentage(field=name, value=value) from None
    if not pct.is_finite() or pct < 0 or pct > HUNDRED:
        raise InvalidPercentage(field=name, value=value)
    return pct


def base_price(entry: CatalogEntry, quantity: int) -> Decimal:
    """Apply the variant kind's own rule to ``quantity`` pieces of ``entry``."""
    kind = entry.kind
    if isinstance(kind, LimitedEdition):
        # The edition rule replaces the Plain bulk rule entirely
        price = (entry.unit_price + kind.premium) * quantity
        if quantity > kind.threshold:
            price *= kind.rate
        return price
    subtotal = entry.unit_price * quantity
    if isinstance(kind, Plain):
        rule = entry.bulk_discount
        if rule is not None and quantity > rule.threshold:
            return subtotal * rule.rate
        return subtotal
    if isinstance(kind, Flavored):
        return subtotal
    raise TypeError(f"Unsupported variant kind: {type(kind).__name__}")


def compute_price(
    entry: CatalogEntry,
    quantity: int,
    discount_percent=0,
    tax_percent=0,
) -> PricingResult:
    """Run the full pricing pipeline and return every intermediate value.

    Raises:
        InvalidQuantity: if ``quantity`` is not an integer >= 1.
        InvalidPercentage: if either percentage is outside ``[0, 100]``.
    """
    quantity = validate_quantity(quantity)
    discount = validate_percentage(discount_percent, "discount_percent")
    tax = validate_percentage(tax_percent, "tax_percent")

    subtotal = entry.unit_price * quantity
    base = base_price(entry, quantity)
    after_discount = base * (1 - discount / HUNDRED)
    after_tax = after_discount * (1 + tax / HUNDRED)
    return PricingResult(
        subtotal=subtotal,
        base_price=base,
        after_discount=after_discount,
        after_tax=after_tax,
    )


def price(entry: CatalogEntry, quantity: int, discount_percent=0, tax_percent=0) -> Decimal:
    """Final charge for ``quantity`` pieces, rounded to cents."""
    return compute_price(entry, quantity, discount_percent, tax_percent).total
