# --- path/bootstrap (keep this at the very top) ---
from pathlib import Path
import sys

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
# --- end path/bootstrap ---

import dataclasses
import unittest
from decimal import Decimal

from catalog import (
    BulkDiscount,
    Catalog,
    CatalogEntry,
    Flavored,
    LimitedEdition,
    Plain,
    default_catalog,
)


class TestCatalogEntry(unittest.TestCase):

    def test_unit_price_is_stored_as_decimal(self):
        entry = CatalogEntry(id="a", base_name="A", unit_price=2.2, calories=10)
        self.assertEqual(entry.unit_price, Decimal("2.2"))
        self.assertIsInstance(entry.kind, Plain)

    def test_entries_are_immutable(self):
        entry = CatalogEntry(id="a", base_name="A", unit_price="1.00", calories=10)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            entry.unit_price = Decimal("9.99")

    def test_limited_edition_display_name(self):
        entry = CatalogEntry(
            id="w", base_name="Dark Chocolate", unit_price="2.50", calories=150,
            kind=LimitedEdition("Winter"),
        )
        self.assertEqual(entry.display_name, "Dark Chocolate (Winter Edition)")
        self.assertEqual(entry.listed_unit_price, Decimal("4.00"))

    def test_flavor_description(self):
        nut = CatalogEntry(
            id="n", base_name="Nutty", unit_price="3", calories=200,
            kind=Flavored("Hazelnut", flavor_note="crunchy bits"),
        )
        fruit = CatalogEntry(id="f", base_name="Fruit", unit_price="3.2", calories=190, kind=Flavored("Strawberry"))
        plain = CatalogEntry(id="p", base_name="Milk", unit_price="2", calories=180)
        self.assertEqual(nut.flavor_description, "Hazelnut flavor with crunchy bits")
        self.assertEqual(fruit.flavor_description, "Strawberry")
        self.assertIsNone(plain.flavor_description)

    def test_describe_per_kind(self):
        catalog = default_catalog()
        dark = catalog.get("dark").describe()
        self.assertIn("Chocolate: Dark Chocolate | Price: $2.50 per piece | Calories: 150", dark)
        self.assertIn("70% cocoa", dark)

        fruit = catalog.get("fruit").describe()
        self.assertIn("Flavor: Strawberry", fruit)

        winter = catalog.get("dark-winter").describe().splitlines()
        self.assertEqual(winter[0], "Limited Edition Chocolate: Dark Chocolate (Winter Edition)")
        self.assertEqual(winter[1], "Price: $4.00 per piece | Calories: 150")

    def test_validation(self):
        with self.assertRaises(ValueError):
            CatalogEntry(id="", base_name="A", unit_price="1", calories=1)
        with self.assertRaises(ValueError):
            CatalogEntry(id="a", base_name=" ", unit_price="1", calories=1)
        with self.assertRaises(ValueError):
            CatalogEntry(id="a", base_name="A", unit_price="-0.01", calories=1)
        with self.assertRaises(ValueError):
            CatalogEntry(id="a", base_name="A", unit_price="abc", calories=1)
        with self.assertRaises(ValueError):
            CatalogEntry(id="a", base_name="A", unit_price="1", calories=-5)

    def test_bulk_discount_only_on_plain_entries(self):
        with self.assertRaises(ValueError):
            CatalogEntry(
                id="w", base_name="W", unit_price="1", calories=1,
                kind=LimitedEdition("Winter"), bulk_discount=BulkDiscount(),
            )
        with self.assertRaises(ValueError):
            CatalogEntry(
                id="f", base_name="F", unit_price="1", calories=1,
                kind=Flavored("Mint"), bulk_discount=BulkDiscount(),
            )


class TestCatalog(unittest.TestCase):

    def test_default_catalog_order_and_ids(self):
        catalog = default_catalog()
        self.assertEqual(
            [e.id for e in catalog],
            ["dark", "milk", "white", "nutty", "fruit", "dark-winter"],
        )
        self.assertEqual(len(catalog), 6)
        self.assertIn("milk", catalog)
        self.assertIsNotNone(catalog.get("dark").bulk_discount)
        self.assertTrue(all(e.bulk_discount is None for e in catalog if e.id != "dark"))

    def test_index_lookup_is_one_based(self):
        catalog = default_catalog()
        self.assertEqual(catalog.get_by_index(1).id, "dark")
        self.assertEqual(catalog.get_by_index(6).id, "dark-winter")
        for bad in (0, 7, -1, True, "1", None):
            self.assertIsNone(catalog.get_by_index(bad), repr(bad))

    def test_unknown_id(self):
        self.assertIsNone(default_catalog().get("caramel"))

    def test_duplicate_ids_rejected(self):
        a = CatalogEntry(id="a", base_name="A", unit_price="1", calories=1)
        with self.assertRaises(ValueError):
            Catalog([a, a])


if __name__ == "__main__":
    unittest.main(verbosity=2)
