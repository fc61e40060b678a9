"""
Unit tests for the catalog selection model.

Covers selection edits, quantity parsing, size key normalization and
line item projection.
"""

import pytest

from core.exceptions import ValidationError
from models.product import Product
from models.selection import CatalogSelection, parse_quantity


# Fixtures

@pytest.fixture
def tee():
    """A product with lettered sizes."""
    return Product(
        id="p1",
        name="Classic Tee",
        style_number="ST-1001",
        colors=("navy", "white", "black"),
        sizes=("S", "M", "L"),
    )


@pytest.fixture
def jeans():
    """A product with numeric sizes only."""
    return Product(
        id="p2",
        name="Work Jeans",
        style_number="JN-220",
        colors=("indigo",),
        sizes_in_number=(30.0, 32.0, 34.0),
    )


@pytest.fixture
def selection(tee, jeans):
    return CatalogSelection([tee, jeans])


# Tests for quantity parsing

class TestParseQuantity:
    """Test raw input -> quantity conversion."""

    @pytest.mark.parametrize("raw, expected", [
        ("12", 12),
        (" 7 ", 7),
        ("3.9", 3),
        ("5 pcs", 5),
        ("", 0),
        ("abc", 0),
        (None, 0),
        ("-3", 0),
        (-4, 0),
        (6, 6),
    ])
    def test_parse(self, raw, expected):
        assert parse_quantity(raw) == expected


# Tests for CatalogSelection

class TestCatalogSelection:
    """Test selection edits and item projection."""

    def test_set_quantity_creates_selection_with_first_color(self, selection, tee):
        selection.set_quantity(tee, "M", "4")

        entry = selection.get("p1")
        assert entry is not None
        assert entry.selected_color == "navy"
        assert entry.product_name == "Classic Tee"
        assert entry.style_number == "ST-1001"
        assert entry.quantities == {"M": 4}

    def test_set_color_preserves_quantities(self, selection, tee):
        selection.set_quantity(tee, "S", "2")
        selection.set_color(tee, "white")

        entry = selection.get("p1")
        assert entry.selected_color == "white"
        assert entry.quantities == {"S": 2}

    def test_set_color_creates_selection_without_quantities(self, selection, tee):
        selection.set_color(tee, "black")

        assert selection.get("p1").quantities == {}
        assert selection.project_items() == []

    def test_set_color_rejects_unknown_color(self, selection, tee):
        with pytest.raises(ValidationError) as exc_info:
            selection.set_color(tee, "purple")

        assert exc_info.value.field == "color"
        assert selection.get("p1") is None

    def test_zeroed_sizes_contribute_no_items(self, selection, tee):
        selection.set_quantity(tee, "S", "3")
        selection.set_quantity(tee, "M", "1")
        selection.set_quantity(tee, "S", "0")
        selection.set_quantity(tee, "M", "")

        assert selection.project_items() == []
        assert selection.total_quantity() == 0

    def test_negative_input_is_clamped(self, selection, tee):
        selection.set_quantity(tee, "L", "-5")

        assert selection.get("p1").quantities["L"] == 0
        assert selection.total_quantity() == 0

    def test_numeric_and_string_sizes_share_a_key(self, selection, jeans):
        selection.set_quantity(jeans, 32, "2")
        selection.set_quantity(jeans, "32", "5")
        selection.set_quantity(jeans, 32.0, "6")

        items = selection.project_items()
        assert len(items) == 1
        assert items[0].size == "32"
        assert items[0].quantity == 6

    def test_projection_order_follows_edit_order(self, selection, tee, jeans):
        selection.set_quantity(jeans, 34, "1")
        selection.set_quantity(tee, "L", "2")
        selection.set_quantity(tee, "S", "3")
        selection.set_quantity(jeans, 30, "4")

        keys = [(i.product_id, i.size) for i in selection.project_items()]
        assert keys == [("p2", "34"), ("p2", "30"), ("p1", "L"), ("p1", "S")]

    def test_total_quantity_matches_items(self, selection, tee, jeans):
        selection.set_quantity(tee, "S", "3")
        selection.set_quantity(tee, "M", "0")
        selection.set_quantity(jeans, 30, "10")

        items = selection.project_items()
        assert selection.total_quantity() == sum(i.quantity for i in items) == 13

    def test_blank_style_number_falls_back_to_live_product(self):
        draft = Product(id="p9", name="Polo", style_number="", colors=("red",), sizes=("M",))
        selection = CatalogSelection([draft])
        selection.set_quantity(draft, "M", "1")

        published = Product(id="p9", name="Polo", style_number="PL-9", colors=("red",), sizes=("M",))
        selection.load_catalog([published])

        assert selection.project_items()[0].style_number == "PL-9"

    def test_captured_names_are_not_rederived(self, selection, tee):
        selection.set_quantity(tee, "S", "1")
        renamed = Product(id="p1", name="Renamed Tee", style_number="ST-2",
                          colors=tee.colors, sizes=tee.sizes)
        selection.load_catalog([renamed])

        item = selection.project_items()[0]
        assert item.product_name == "Classic Tee"
        assert item.style_number == "ST-1001"

    def test_remove_discards_product(self, selection, tee, jeans):
        selection.set_quantity(tee, "S", "1")
        selection.set_quantity(jeans, 30, "1")

        assert selection.remove("p1") is True
        assert selection.remove("p1") is False
        assert [i.product_id for i in selection.project_items()] == ["p2"]

    def test_clear(self, selection, tee):
        selection.set_quantity(tee, "S", "1")
        selection.clear()

        assert selection.get("p1") is None
        assert selection.total_quantity() == 0

    def test_search_by_name_or_style(self, selection):
        assert [p.id for p in selection.search("tee")] == ["p1"]
        assert [p.id for p in selection.search("jn-")] == ["p2"]
        assert len(selection.search("")) == 2
