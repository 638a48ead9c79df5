"""Tests for barcode resolution and product search."""

from catalog_mirror.models import validate_snapshot
from catalog_mirror.services import resolve, search_products


def _products(record_factory):
    return validate_snapshot([
        record_factory(id="p-1", name="Olive Oil 1L", barcode="12345", category="Grocery"),
        record_factory(id="p-2", name="Green Tea", barcode="67890", category="Drinks", supplier="Nile Trading"),
        record_factory(id="p-3", name="Olive Oil 1L (promo)", barcode="12345", category="Grocery"),
    ]).products


class TestResolve:
    """Test exact barcode lookup."""

    def test_match_returns_product(self, record_factory):
        products = _products(record_factory)

        product = resolve("67890", products)

        assert product is not None
        assert product.id == "p-2"

    def test_miss_returns_none(self, record_factory):
        assert resolve("99999", _products(record_factory)) is None

    def test_first_match_in_snapshot_order(self, record_factory):
        assert resolve("12345", _products(record_factory)).id == "p-1"

    def test_match_is_exact(self, record_factory):
        products = _products(record_factory)

        assert resolve(" 12345", products) is None
        assert resolve("1234", products) is None
        assert resolve("123456", products) is None

    def test_empty_snapshot(self):
        assert resolve("12345", ()) is None

    def test_does_not_modify_snapshot(self, record_factory):
        products = _products(record_factory)
        before = tuple(products)

        resolve("12345", products)

        assert products == before


class TestSearchProducts:
    """Test the listing search filter."""

    def test_empty_term_returns_all(self, record_factory):
        assert len(search_products(_products(record_factory), "")) == 3

    def test_name_is_case_insensitive(self, record_factory):
        results = search_products(_products(record_factory), "olive")

        assert [p.id for p in results] == ["p-1", "p-3"]

    def test_barcode_substring(self, record_factory):
        assert [p.id for p in search_products(_products(record_factory), "789")] == ["p-2"]

    def test_category_and_supplier(self, record_factory):
        products = _products(record_factory)

        assert [p.id for p in search_products(products, "DRINKS")] == ["p-2"]
        assert [p.id for p in search_products(products, "nile")] == ["p-2"]

    def test_no_match(self, record_factory):
        assert search_products(_products(record_factory), "coffee") == []
