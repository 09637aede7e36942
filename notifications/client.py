import logging

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class EmenuClient:
    """
    Thin wrapper over the public E-Menu endpoints used at the table.
    Returns the ``data`` part of the response envelope and raises
    ApiError for anything else.
    """

    def __init__(self, base_url, timeout=10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}/{path.lstrip('/')}"
        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError("Cannot reach server") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            raise ApiError(
                f"Unexpected response from server (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        if not response.ok or not payload.get("success"):
            raise ApiError(
                payload.get("message") or f"Request failed (HTTP {response.status_code})",
                status_code=response.status_code,
                payload=payload,
            )

        return payload.get("data")

    # ----------------------------
    # Menu
    # ----------------------------

    def get_categories(self):
        return self._request("GET", "categories")

    def get_menu_items(self, category=None, search=None):
        params = {}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        return self._request("GET", "menu-items", params=params)

    # ----------------------------
    # Table
    # ----------------------------

    def get_table(self, table_number):
        return self._request("GET", f"tables/number/{table_number}")

    def get_table_orders(self, table_number):
        return self._request("GET", f"orders/table/{table_number}")

    def get_table_staff_calls(self, table_number):
        return self._request("GET", f"staff-calls/table/{table_number}")

    def get_table_payment_requests(self, table_number):
        return self._request("GET", f"payment-requests/table/{table_number}")

    def get_order(self, order_id):
        return self._request("GET", f"orders/{order_id}")

    # ----------------------------
    # Customer requests
    # ----------------------------

    def create_order(self, table_number, customer_name, items, notes=None):
        body = {
            "tableNumber": table_number,
            "customerName": customer_name,
            "items": items,
        }
        if notes:
            body["notes"] = notes
        return self._request("POST", "orders", json=body)

    def create_staff_call(self, table_number, customer_name, reason):
        return self._request("POST", "staff-calls", json={
            "tableNumber": table_number,
            "customerName": customer_name,
            "reason": reason,
        })

    def create_payment_request(self, table_number, customer_name, payment_method):
        return self._request("POST", "payment-requests", json={
            "tableNumber": table_number,
            "customerName": customer_name,
            "paymentMethod": payment_method,
        })
