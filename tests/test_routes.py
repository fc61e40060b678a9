"""
Integration tests for the Flask routes.

The app is built with a fake API client factory, so requests exercise the
real blueprints, cookie handling and workspaces without any network.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from app import create_app
from core.exceptions import CollaboratorError
from models.order import Order, OrderStatus
from models.product import DashboardStats, Product
from models.user import User, UserRole


USERS = {
    "buyer@acme.test": User(id="c1", email="buyer@acme.test", name="Dana",
                            role=UserRole.CUSTOMER, company="Acme Corp"),
    "admin@portal.test": User(id="a1", email="admin@portal.test", name="Ops",
                              role=UserRole.ADMIN),
}
PASSWORD = "secret"


class FakeBackend:
    """In-memory stand-in for the portal API shared by all fake clients."""

    def __init__(self):
        self.products = [
            Product(id="p1", name="Classic Tee", style_number="ST-1001",
                    colors=("navy", "white"), sizes=("S", "M", "L")),
            Product(id="p2", name="Work Jeans", style_number="JN-220",
                    colors=("indigo",), sizes_in_number=(30.0, 32.0)),
            Product(id="p3", name="Sample Only", style_number="SO-1"),
        ]
        self.orders = []
        self.fail_create = None
        self.fail_status = None
        self.create_calls = []

    def add_order(self, order_id, customer, created, status=OrderStatus.PENDING):
        order = Order(
            id=order_id,
            customer_id="c1",
            customer_name=customer,
            customer_email="buyer@acme.test",
            po_number=f"PO-{order_id}",
            status=status,
            total_items=3,
            created_at=created,
        )
        self.orders.append(order)
        return order


class FakeClient:
    """Implements the PortalAPIClient methods the routes use."""

    def __init__(self, backend, session):
        self.backend = backend
        self.session = session

    def login(self, email, password):
        user = USERS.get(email)
        if user is None or password != PASSWORD:
            raise CollaboratorError("Invalid email or password", status_code=401)
        self.session.set_tokens(f"access-{user.id}", f"refresh-{user.id}")
        self.session.user = user
        return user

    def logout(self):
        self.session.teardown()

    def list_products(self):
        return list(self.backend.products)

    def list_orders(self):
        return list(self.backend.orders)

    def create_order(self, po_number, items):
        self.backend.create_calls.append((po_number, list(items)))
        if self.backend.fail_create:
            raise self.backend.fail_create
        order = Order(
            id=f"ord-{len(self.backend.create_calls)}",
            customer_id=self.session.user.id,
            customer_name=self.session.user.display_name,
            po_number=po_number,
            status=OrderStatus.PENDING,
            total_items=sum(i.quantity for i in items),
            created_at=datetime.now(timezone.utc),
            items=tuple(items),
        )
        self.backend.orders.append(order)
        return order

    def update_order_status(self, order_id, status):
        if self.backend.fail_status:
            raise self.backend.fail_status
        for index, order in enumerate(self.backend.orders):
            if order.id == order_id:
                updated = replace(order, status=status)
                self.backend.orders[index] = updated
                return updated
        raise CollaboratorError("Order not found", status_code=404)

    def get_dashboard_stats(self):
        return DashboardStats(total_orders=len(self.backend.orders))

    def close(self):
        pass


# Fixtures

@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def app(backend):
    app = create_app(
        "config.TestingConfig",
        client_factory=lambda session: FakeClient(backend, session),
    )
    yield app
    app.config["WORKSPACE_STORE"].clear()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email, role=None):
    body = {"email": email, "password": PASSWORD}
    if role:
        body["role"] = role
    return client.post("/auth/login", json=body)


@pytest.fixture
def customer(client):
    assert _login(client, "buyer@acme.test").status_code == 200
    return client


@pytest.fixture
def admin(client):
    assert _login(client, "admin@portal.test", role="admin").status_code == 200
    return client


# Tests for auth routes

class TestAuthRoutes:

    def test_login_and_me(self, client):
        response = _login(client, "buyer@acme.test")

        assert response.status_code == 200
        assert response.get_json()["user"]["role"] == "customer"
        assert client.get("/auth/me").get_json()["user"]["email"] == "buyer@acme.test"

    def test_bad_password(self, client):
        response = client.post("/auth/login", json={"email": "buyer@acme.test", "password": "x"})

        assert response.status_code == 401
        assert client.get("/auth/me").status_code == 401

    def test_missing_fields(self, client):
        assert client.post("/auth/login", json={"email": "buyer@acme.test"}).status_code == 400

    def test_role_mismatch_is_refused(self, client):
        response = _login(client, "buyer@acme.test", role="admin")

        assert response.status_code == 403
        assert client.get("/auth/me").status_code == 401

    def test_logout_discards_workspace(self, app, customer):
        assert len(app.config["WORKSPACE_STORE"]) == 1

        assert customer.post("/auth/logout").status_code == 200

        assert len(app.config["WORKSPACE_STORE"]) == 0
        assert customer.get("/catalog").status_code == 401

    def test_customer_cannot_use_admin_routes(self, customer):
        assert customer.get("/admin/orders").status_code == 403

    def test_admin_cannot_use_catalog(self, admin):
        assert admin.get("/catalog").status_code == 403


# Tests for catalog and submission routes

class TestCatalogRoutes:

    def test_catalog_hides_unorderable_products(self, customer):
        data = customer.get("/catalog").get_json()

        assert [p["id"] for p in data["products"]] == ["p1", "p2"]
        assert data["cart"]["totalQuantity"] == 0

    def test_catalog_search(self, customer):
        data = customer.get("/catalog?q=jeans").get_json()

        assert [p["id"] for p in data["products"]] == ["p2"]

    def test_quantity_edits_build_cart(self, customer):
        customer.get("/catalog")
        customer.post("/selections/p1/color", json={"color": "white"})
        customer.post("/selections/p1/quantity", json={"size": "M", "quantity": "4"})
        response = customer.post("/selections/p2/quantity", json={"size": 32, "quantity": "2"})

        cart = response.get_json()
        assert cart["totalQuantity"] == 6
        assert [(i["productId"], i["color"], i["size"]) for i in cart["items"]] == [
            ("p1", "white", "M"),
            ("p2", "indigo", "32"),
        ]

    def test_unknown_size_is_rejected(self, customer):
        customer.get("/catalog")

        response = customer.post("/selections/p1/quantity", json={"size": "XXL", "quantity": "1"})

        assert response.status_code == 400
        assert response.get_json()["field"] == "size"

    def test_unknown_color_is_rejected(self, customer):
        customer.get("/catalog")

        response = customer.post("/selections/p1/color", json={"color": "purple"})

        assert response.status_code == 400
        assert response.get_json()["field"] == "color"

    def test_submit_without_po_number(self, customer, backend):
        customer.get("/catalog")
        customer.post("/selections/p1/quantity", json={"size": "S", "quantity": "1"})

        response = customer.post("/order/submit", json={"po_number": "  "})

        assert response.status_code == 400
        assert "po_number" in response.get_json()["outcome"]["fieldErrors"]
        assert backend.create_calls == []

    def test_submit_places_order_and_clears_cart(self, customer, backend):
        customer.get("/catalog")
        customer.post("/selections/p1/quantity", json={"size": "S", "quantity": "3"})

        response = customer.post("/order/submit", json={"po_number": "PO-777"})

        assert response.status_code == 201
        body = response.get_json()
        assert body["outcome"]["state"] == "succeeded"
        assert body["outcome"]["poNumber"] == "PO-777"
        assert body["cart"]["items"] == []
        assert len(backend.create_calls) == 1

    def test_failed_submit_keeps_cart(self, customer, backend):
        backend.fail_create = CollaboratorError("Credit limit exceeded", status_code=422)
        customer.get("/catalog")
        customer.post("/selections/p1/quantity", json={"size": "S", "quantity": "3"})

        response = customer.post("/order/submit", json={"po_number": "PO-1"})

        assert response.status_code == 502
        body = response.get_json()
        assert body["outcome"]["error"] == "Credit limit exceeded"
        assert body["cart"]["totalQuantity"] == 3
        assert customer.get("/selections").get_json()["totalQuantity"] == 3


class TestSpecialCharacters:
    """Ampersands and angle brackets reach the API exactly as typed."""

    @pytest.fixture(autouse=True)
    def polo(self, backend):
        backend.products.append(Product(id="p9", name="Polo", style_number="PL-9",
                                        colors=("Navy", "Black & White"), sizes=("M",)))

    def test_color_with_ampersand_is_accepted(self, customer):
        customer.get("/catalog")

        response = customer.post("/selections/p9/color", json={"color": "Black & White"})

        assert response.status_code == 200
        assert response.get_json()["selections"][0]["selectedColor"] == "Black & White"

    def test_missing_color_is_rejected(self, customer):
        customer.get("/catalog")

        response = customer.post("/selections/p9/color", json={})

        assert response.status_code == 400
        assert response.get_json()["field"] == "color"

    def test_po_number_with_ampersand_and_brackets_is_sent_as_typed(self, customer, backend):
        customer.get("/catalog")
        customer.post("/selections/p9/color", json={"color": "Black & White"})
        customer.post("/selections/p9/quantity", json={"size": "M", "quantity": "2"})

        response = customer.post("/order/submit", json={"po_number": " R&D<100> "})

        assert response.status_code == 201
        po_number, items = backend.create_calls[0]
        assert po_number == "R&D<100>"
        assert items[0].color == "Black & White"
        assert response.get_json()["outcome"]["poNumber"] == "R&D<100>"

    def test_po_number_field_keeps_ampersand(self, customer):
        response = customer.put("/order/po-number", json={"po_number": "Smith & Sons #4"})

        assert response.get_json()["poNumberField"] == "Smith & Sons #4"

    def test_markup_is_stripped_from_po_number(self, customer):
        response = customer.put("/order/po-number", json={"po_number": "<b>PO-5</b>"})

        assert response.get_json()["poNumberField"] == "PO-5"


# Tests for order history routes

class TestOrderHistoryRoutes:

    def test_history_is_newest_first_with_single_expansion(self, customer, backend):
        backend.add_order("T1", "Acme Corp", datetime(2024, 1, 1, tzinfo=timezone.utc))
        backend.add_order("T2", "Acme Corp", datetime(2024, 3, 1, tzinfo=timezone.utc))
        backend.add_order("T3", "Acme Corp", datetime(2024, 2, 1, tzinfo=timezone.utc))

        data = customer.get("/orders").get_json()
        assert [o["id"] for o in data["orders"]] == ["T2", "T3", "T1"]

        customer.post("/orders/T1/toggle")
        data = customer.post("/orders/T3/toggle").get_json()
        assert data["expandedOrderId"] == "T3"
        assert [o["id"] for o in data["orders"] if o["expanded"]] == ["T3"]


# Tests for admin routes

class TestAdminRoutes:

    @pytest.fixture(autouse=True)
    def seed(self, backend):
        backend.add_order("T1", "Acme Corp", datetime(2024, 1, 1, tzinfo=timezone.utc))
        backend.add_order("T2", "Blue Harbor", datetime(2024, 3, 1, tzinfo=timezone.utc),
                          status=OrderStatus.CONFIRMED)

    def test_status_change_updates_list_and_detail(self, admin):
        admin.get("/admin/orders")
        admin.get("/admin/orders/T2")

        response = admin.patch("/admin/orders/T2/status", json={"status": "shipped"})

        assert response.status_code == 200
        data = response.get_json()
        assert data["updated"]["status"] == "shipped"
        assert data["detail"]["status"] == "shipped"
        assert {o["id"]: o["status"] for o in data["orders"]}["T2"] == "shipped"

    def test_failed_status_change_reports_502(self, admin, backend):
        backend.fail_status = CollaboratorError("Forbidden", status_code=403)
        admin.get("/admin/orders")

        response = admin.patch("/admin/orders/T2/status", json={"status": "shipped"})

        assert response.status_code == 502
        orders = admin.get("/admin/orders").get_json()["orders"]
        assert {o["id"]: o["status"] for o in orders}["T2"] == "confirmed"

    def test_unknown_status_is_400(self, admin):
        admin.get("/admin/orders")

        response = admin.patch("/admin/orders/T1/status", json={"status": "lost"})

        assert response.status_code == 400
        assert response.get_json()["field"] == "status"

    def test_unknown_order_detail_is_404(self, admin):
        assert admin.get("/admin/orders/nope").status_code == 404

    def test_export_csv_of_filtered_list(self, admin):
        response = admin.get("/admin/orders/export.csv?q=harbor")

        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert "attachment" in response.headers["Content-Disposition"]
        lines = response.get_data(as_text=True).split("\n")
        assert lines[0] == "Order ID,Customer,PO Number,Items,Status,Date"
        assert lines[1:] == ["T2,Blue Harbor,PO-T2,3,confirmed,2024-03-01"]

    def test_dashboard(self, admin):
        assert admin.get("/admin/dashboard").get_json()["stats"]["totalOrders"] == 2


class TestHealth:

    def test_health(self, client):
        data = client.get("/health").get_json()

        assert data["status"] == "ok"
        assert data["checks"]["workspaces"] == 0
