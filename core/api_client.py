"""
Portal REST API client.

This module wraps the external portal API that owns products, customers,
orders and authentication. The portal never persists anything itself; every
read and write goes through this client.

SESSION HANDLING:
    - The client is bound to one PortalSession (passed in, never global)
    - Every request carries "Authorization: Bearer <access token>"
    - A 401 triggers ONE refresh and ONE replay of the request
    - If the refresh fails, the session is torn down and SessionExpiredError
      is raised; the caller must log in again

NO AUTOMATIC RETRIES:
    A failed request is reported, never repeated. Repeating createOrder could
    place a duplicate order; reads are re-run only when the user asks.

Usage:
    session = PortalSession.from_dict(flask_session.get("portal"))
    client = PortalAPIClient("http://localhost:3001/api", session, timeout=15)

    products = client.list_products()
    order = client.create_order("PO-100", items)
    order = client.update_order_status(order.id, OrderStatus.SHIPPED)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from models.order import Order, OrderItem, OrderStatus
from models.product import Product, DashboardStats
from models.user import User
from .exceptions import CollaboratorError, SessionExpiredError
from .session import PortalSession


DEFAULT_TIMEOUT_SECONDS = 15.0

UNREADABLE_CREATED_ORDER_MESSAGE = (
    "The order may have been placed, but the response could not be read. "
    "Check your order history before submitting again."
)


class PortalAPIClient:
    """
    Client for the portal REST API.

    One instance serves one PortalSession. The underlying requests.Session
    keeps connections alive between calls.

    Attributes:
        base_url: API root, without trailing slash
        session: PortalSession whose tokens authenticate requests
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        session: PortalSession,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root URL (e.g., "http://localhost:3001/api")
            session: Portal session providing and receiving tokens
            timeout: Per-request timeout in seconds
            http: Optional requests.Session (a new one is created otherwise)
            logger: Logger instance (creates default if not provided)

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self._http = http or requests.Session()
        self._http.headers.update({"Content-Type": "application/json"})
        self._logger = logger or logging.getLogger("order_portal.core.api_client")

    # =========================================================================
    # AUTH
    # =========================================================================

    def login(self, email: str, password: str) -> User:
        """
        Authenticate and store the returned tokens and user in the session.

        Raises:
            CollaboratorError: If the API rejects the credentials
        """
        data, user = self._send(
            "POST", "/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
            operation="login",
            default_message="Login failed",
            parse=lambda body: (body, User.from_api(body.get("user") or {})),
            record="login response",
        )
        self.session.set_tokens(data.get("accessToken"), data.get("refreshToken"))
        self.session.user = user
        self._logger.info(f"Logged in as {user.email} ({user.role.value})")
        return user

    def logout(self) -> None:
        """
        Revoke the refresh token and tear down the session.

        API failures are logged and ignored: the local session is torn down
        either way.
        """
        refresh_token = self.session.refresh_token
        if refresh_token:
            try:
                self._request(
                    "POST", "/auth/logout",
                    json={"refreshToken": refresh_token},
                    operation="logout",
                )
            except CollaboratorError as e:
                self._logger.warning(f"Logout request failed, ignoring: {e.message}")
        self.session.teardown()

    def refresh(self) -> bool:
        """
        Exchange the refresh token for new tokens.

        Returns:
            True if the session now holds fresh tokens, False otherwise
        """
        refresh_token = self.session.refresh_token
        if not refresh_token:
            return False

        try:
            response = self._http.post(
                self._url("/auth/refresh"),
                json={"refreshToken": refresh_token},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self._logger.warning(f"Token refresh failed: {e}")
            return False

        if not response.ok:
            self._logger.info(f"Token refresh rejected: HTTP {response.status_code}")
            return False

        try:
            data = self._unwrap(response)
        except CollaboratorError:
            return False
        access_token = data.get("accessToken") if isinstance(data, dict) else None
        if not access_token:
            return False

        self.session.set_tokens(access_token, data.get("refreshToken") or refresh_token)
        self._logger.debug("Access token refreshed")
        return True

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def list_products(self) -> List[Product]:
        return self._request(
            "GET", "/products",
            operation="list_products",
            parse=lambda data: [Product.from_api(p) for p in data or []],
            record="product list",
        )

    # =========================================================================
    # ORDERS
    # =========================================================================

    def list_orders(self) -> List[Order]:
        """Orders visible to the signed-in user (the API scopes by role)."""
        return self._request(
            "GET", "/orders",
            operation="list_orders",
            parse=lambda data: [Order.from_api(o) for o in data or []],
            record="order list",
        )

    def create_order(self, po_number: str, items: Sequence[OrderItem]) -> Order:
        """
        Place an order.

        Only the PO number and items are sent. The API computes totalItems
        and assigns id, createdAt and the customer from the token.

        An unreadable success response is reported as a CollaboratorError
        whose message tells the user to check the order history first, since
        the order exists on the server.
        """
        payload = {
            "poNumber": po_number,
            "items": [item.to_dict() for item in items],
        }
        order = self._request(
            "POST", "/orders",
            json=payload,
            operation="create_order",
            default_message="Failed to place order",
            parse=Order.from_api,
            record="order",
            invalid_message=UNREADABLE_CREATED_ORDER_MESSAGE,
        )
        self._logger.info(
            f"Order created: id={order.id} po={order.po_number} "
            f"lines={len(order.items)} total={order.total_items}"
        )
        return order

    def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        return self._request(
            "PATCH", f"/orders/{order_id}/status",
            json={"status": status.value},
            operation="update_order_status",
            default_message="Failed to update order status",
            parse=Order.from_api,
            record="order",
        )

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def get_dashboard_stats(self) -> DashboardStats:
        return self._request(
            "GET", "/dashboard/stats",
            operation="dashboard_stats",
            parse=lambda data: DashboardStats.from_api(data or {}),
            record="dashboard stats",
        )

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
        default_message: Optional[str] = None,
        parse: Optional[Callable[[Any], Any]] = None,
        record: str = "record",
        invalid_message: Optional[str] = None
    ) -> Any:
        """
        Send an authenticated request, refreshing the token once on 401.

        Raises:
            SessionExpiredError: If the token is rejected and cannot be refreshed
            CollaboratorError: For any other failure, including a response
                that parse() cannot read
        """
        def send():
            return self._send(
                method, path, json=json,
                operation=operation, default_message=default_message,
                parse=parse, record=record, invalid_message=invalid_message,
            )

        try:
            return send()
        except CollaboratorError as e:
            if e.status_code != 401:
                raise

        self._logger.debug(f"{operation}: access token rejected, refreshing")
        if not self.refresh():
            self._logger.warning(f"{operation}: session expired, tearing down")
            self.session.teardown()
            raise SessionExpiredError(operation=operation)

        try:
            return send()
        except CollaboratorError as e:
            if e.status_code == 401:
                self.session.teardown()
                raise SessionExpiredError(operation=operation)
            raise

    def _send(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
        operation: Optional[str] = None,
        default_message: Optional[str] = None,
        parse: Optional[Callable[[Any], Any]] = None,
        record: str = "record",
        invalid_message: Optional[str] = None
    ) -> Any:
        """
        Send one request and return the unwrapped JSON payload, or parse(payload)
        when a parser is given.
        """
        headers = {}
        if authenticated and self.session.access_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"

        try:
            response = self._http.request(
                method,
                self._url(path),
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            self._logger.error(f"{operation}: request timed out after {self.timeout}s")
            raise CollaboratorError(
                f"The server did not respond within {self.timeout:.0f} seconds",
                operation=operation,
            )
        except requests.exceptions.RequestException as e:
            self._logger.error(f"{operation}: request failed: {e}")
            raise CollaboratorError(
                "Could not reach the ordering service",
                operation=operation,
                details={"error": str(e)},
            )

        if not response.ok:
            message = self._error_message(response) or default_message or response.reason
            self._logger.warning(f"{operation}: HTTP {response.status_code} - {message}")
            raise CollaboratorError(
                message or f"HTTP {response.status_code}",
                status_code=response.status_code,
                operation=operation,
            )

        payload = self._unwrap(response)
        if parse is None:
            return payload

        try:
            return parse(payload)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            self._logger.error(f"{operation}: unreadable {record} in response: {e}")
            raise CollaboratorError(
                invalid_message or f"Invalid {record} in API response",
                status_code=response.status_code,
                operation=operation,
                details={"error": str(e)},
            )

    @staticmethod
    def _unwrap(response: requests.Response) -> Any:
        """Return body["data"] when the API wraps its payload, else the body."""
        if response.status_code == 204 or not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            raise CollaboratorError(
                "Invalid JSON in API response",
                status_code=response.status_code,
            )
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _error_message(response: requests.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return body.get("message") or None
        return None

    def close(self) -> None:
        self._http.close()
