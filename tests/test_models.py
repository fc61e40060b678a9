"""
Unit tests for the API-facing data models.
"""

from datetime import datetime, timezone

import pytest

from core.session import PortalSession
from models.order import Order, OrderStatus
from models.product import Product, size_key
from models.timestamps import parse_timestamp
from models.user import User, UserRole


class TestSizeKey:

    @pytest.mark.parametrize("raw, expected", [
        ("M", "M"),
        (" XL ", "XL"),
        (32, "32"),
        (32.0, "32"),
        (9.5, "9.5"),
    ])
    def test_size_key(self, raw, expected):
        assert size_key(raw) == expected

    def test_boolean_is_rejected(self):
        with pytest.raises(TypeError):
            size_key(True)


class TestProduct:

    def test_size_keys_merge_labels_and_numbers(self):
        product = Product(id="p1", name="Jeans", style_number="JN-1",
                          colors=("indigo",), sizes=("30", "S"), sizes_in_number=(30.0, 32.0))

        assert product.size_keys == ["30", "S", "32"]

    def test_product_without_colors_is_not_orderable(self):
        product = Product(id="p1", name="Blank", style_number="B-1", sizes=("M",))

        assert not product.is_orderable
        assert product.default_color is None


class TestOrderStatus:

    def test_parse_known_and_unknown(self):
        assert OrderStatus.parse(" Shipped ") is OrderStatus.SHIPPED
        assert OrderStatus.parse("cancelled") is None

    def test_label(self):
        assert OrderStatus.PROCESSING.label == "Processing"


class TestOrder:

    def test_from_api_prefers_nested_customer(self):
        order = Order.from_api({
            "id": "ord-1",
            "customerId": "c1",
            "customerName": "Flat Name",
            "customer": {"name": "Nested Name", "email": "n@acme.test"},
            "poNumber": "PO-1",
            "status": "confirmed",
            "totalItems": 3,
            "createdAt": "2024-03-05T14:30:00Z",
        })

        assert order.customer_name == "Nested Name"
        assert order.customer_email == "n@acme.test"
        assert order.status is OrderStatus.CONFIRMED
        assert order.created_at == datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)

    def test_from_api_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            Order.from_api({"id": "ord-1", "status": "lost"})

    def test_from_api_rejects_unparseable_timestamp(self):
        with pytest.raises(ValueError):
            Order.from_api({"id": "ord-1", "status": "pending", "createdAt": "yesterday"})

    def test_to_dict_carries_status_label(self):
        order = Order(id="o1", customer_id="c1", po_number="PO", status=OrderStatus.SHIPPED,
                      total_items=1, created_at=None)

        data = order.to_dict()

        assert data["status"] == "shipped"
        assert data["statusLabel"] == "Shipped"
        assert data["createdAt"] is None


class TestTimestamps:

    def test_epoch_milliseconds(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-01-02T03:04:05").tzinfo is timezone.utc

    def test_empty(self):
        assert parse_timestamp("") is None


class TestPortalSession:

    def test_cookie_round_trip(self):
        user = User(id="u1", email="a@b.test", name="A", role=UserRole.ADMIN, company="Acme")
        session = PortalSession("tok", "ref", user)

        restored = PortalSession.from_dict(session.to_dict())

        assert restored.is_authenticated
        assert restored.has_role(UserRole.ADMIN)
        assert restored.user.display_name == "Acme"
        assert session.to_dict()["user"]["displayName"] == "Acme"

    def test_teardown_bumps_revision(self):
        session = PortalSession("tok", "ref", None)
        before = session.revision

        session.teardown()

        assert session.revision == before + 1
        assert session.access_token is None

    def test_empty_payload(self):
        assert not PortalSession.from_dict(None).is_authenticated
