"""Catalog entries, variant kinds and the default chocolate catalog.

Each entry carries one variant kind.  The kind holds only the data its
price rule needs; :func:`pricing.base_price` dispatches on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, List, Optional, Sequence, Union


def to_decimal(value) -> Decimal:
    """Convert a price-like value to :class:`Decimal` without float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None


# ---------- Variant kinds ----------

@dataclass(frozen=True)
class BulkDiscount:
    """Quantity discount for Plain entries: ``rate`` applies above ``threshold``."""
    threshold: int = 10
    rate: Decimal = Decimal("0.90")


@dataclass(frozen=True)
class Plain:
    pass


@dataclass(frozen=True)
class Flavored:
    flavor: str
    flavor_note: Optional[str] = None

    def describe_flavor(self) -> str:
        if self.flavor_note:
            return f"{self.flavor} flavor with {self.flavor_note}"
        return self.flavor


@dataclass(frozen=True)
class LimitedEdition:
    """Premium surcharge per unit plus its own quantity discount."""
    edition_name: str
    premium: Decimal = Decimal("1.50")
    threshold: int = 5
    rate: Decimal = Decimal("0.95")


VariantKind = Union[Plain, Flavored, LimitedEdition]


# ---------- Catalog entry ----------

@dataclass(frozen=True)
class CatalogEntry:
    """One purchasable product variant."""

    id: str
    base_name: str
    unit_price: Decimal
    calories: int
    kind: VariantKind = field(default_factory=Plain)
    description: str = ""
    bulk_discount: Optional[BulkDiscount] = None

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Catalog entry id must not be empty")
        if not self.base_name or not self.base_name.strip():
            raise ValueError("Catalog entry name must not be empty")
        price = to_decimal(self.unit_price)
        if price < 0:
            raise ValueError(f"Unit price must not be negative (got {price})")
        object.__setattr__(self, "unit_price", price)
        if self.calories < 0:
            raise ValueError(f"Calories must not be negative (got {self.calories})")
        if self.bulk_discount is not None and not isinstance(self.kind, Plain):
            raise ValueError("Only Plain entries can carry a bulk discount")

    @property
    def display_name(self) -> str:
        if isinstance(self.kind, LimitedEdition):
            return f"{self.base_name} ({self.kind.edition_name} Edition)"
        return self.base_name

    @property
    def listed_unit_price(self) -> Decimal:
        """Per-piece price shown to customers (includes any edition premium)."""
        if isinstance(self.kind, LimitedEdition):
            return self.unit_price + self.kind.premium
        return self.unit_price

    @property
    def flavor_description(self) -> Optional[str]:
        if isinstance(self.kind, Flavored):
            return self.kind.describe_flavor()
        return None

    def describe(self) -> str:
        """Multi-line product information for listings."""
        price = f"${self.listed_unit_price:.2f} per piece"
        if isinstance(self.kind, LimitedEdition):
            lines = [
                f"Limited Edition Chocolate: {self.display_name}",
                f"Price: {price} | Calories: {self.calories}",
            ]
        elif isinstance(self.kind, Flavored):
            lines = [
                f"Chocolate: {self.display_name} | Flavor: {self.kind.flavor} | "
                f"Price: {price} | Calories: {self.calories}"
            ]
        else:
            lines = [f"Chocolate: {self.display_name} | Price: {price} | Calories: {self.calories}"]
        if self.description:
            lines.append(self.description)
        return "\n".join(lines)


# ---------- Catalog ----------

class Catalog:
    """Ordered, fixed set of catalog entries.

    Indexes are 1-based and stable for the lifetime of the catalog.
    """

    def __init__(self, entries: Sequence[CatalogEntry]) -> None:
        self._entries: List[CatalogEntry] = list(entries)
        self._by_id: Dict[str, CatalogEntry] = {}
        for entry in self._entries:
            if entry.id in self._by_id:
                raise ValueError(f"Duplicate catalog entry id '{entry.id}'")
            self._by_id[entry.id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def get(self, entry_id: str) -> Optional[CatalogEntry]:
        return self._by_id.get(entry_id)

    def get_by_index(self, index: int) -> Optional[CatalogEntry]:
        if isinstance(index, int) and not isinstance(index, bool) and 1 <= index <= len(self._entries):
            return self._entries[index - 1]
        return None

    def entries(self) -> List[CatalogEntry]:
        return list(self._entries)


def default_catalog() -> Catalog:
    """The Chocolate Corner line-up."""
    return Catalog([
        CatalogEntry(
            id="dark",
            base_name="Dark Chocolate",
            unit_price=Decimal("2.50"),
            calories=150,
            description="Rich and intense dark chocolate flavor with minimum 70% cocoa content.",
            bulk_discount=BulkDiscount(),
        ),
        CatalogEntry(
            id="milk",
            base_name="Milk Chocolate",
            unit_price=Decimal("2.00"),
            calories=180,
            description="Smooth and creamy milk chocolate for everyone.",
        ),
        CatalogEntry(
            id="white",
            base_name="White Chocolate",
            unit_price=Decimal("2.20"),
            calories=170,
            description="Sweet white chocolate with hints of vanilla.",
        ),
        CatalogEntry(
            id="nutty",
            base_name="Nutty Chocolate",
            unit_price=Decimal("3.00"),
            calories=200,
            kind=Flavored("Hazelnut", flavor_note="crunchy bits"),
            description="Crunchy hazelnuts packed inside smooth chocolate.",
        ),
        CatalogEntry(
            id="fruit",
            base_name="Fruit Chocolate",
            unit_price=Decimal("3.20"),
            calories=190,
            kind=Flavored("Strawberry"),
            description="Sweet strawberry infused chocolate with fruity aroma.",
        ),
        CatalogEntry(
            id="dark-winter",
            base_name="Dark Chocolate",
            unit_price=Decimal("2.50"),
            calories=150,
            kind=LimitedEdition("Winter"),
            description="Exclusive limited edition with premium ingredients.",
        ),
    ])
