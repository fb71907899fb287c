"""HTTP client for the orderbook API."""

import json
from typing import Any, Optional

import requests

from options_orderbook.constants import DEFAULT_API_URL
from options_orderbook.errors import (
    OrderbookApiError,
    OrderNotFoundError,
    OrderValidationError,
    error_from_response,
)
from options_orderbook.types import OrderFilters, OrderPage, OrderRecord, SignedOrder


class OrderbookApiClient:
    """
    Client for the orderbook REST API.

    Endpoints:
    - POST {api_url}: submit a signed order
    - GET {api_url}: list orders with filters
    - GET {api_url}/order/{hash}: fetch one order
    - POST {api_url}/fill, /cancel, /cleanup: lifecycle actions
    """

    def __init__(self, api_url: str = DEFAULT_API_URL, timeout: int = 30):
        """
        Initialize orderbook API client.

        Args:
            api_url: Orderbook API base URL
            timeout: Request timeout in seconds
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _get_headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    def _request(
        self,
        method: str,
        path: str = "",
        payload: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        order_hash: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Send a request and decode the JSON body.

        Raises:
            OrderbookError: Matching error class when the body carries a known code
            OrderbookApiError: If the request or response is otherwise invalid
        """
        url = f"{self.api_url}{path}"
        try:
            response = requests.request(
                method,
                url,
                json=payload,
                params=params,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise OrderbookApiError(f"Request failed: {e}") from e

        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            body = None

        if not response.ok:
            if isinstance(body, dict):
                message = body.get("error") or body.get("message") or response.text
                raise error_from_response(
                    body.get("code"), f"HTTP {response.status_code}: {message}", order_hash
                )
            raise OrderbookApiError(f"HTTP {response.status_code}: {response.text}")

        if not isinstance(body, dict):
            raise OrderbookApiError(f"Failed to parse response from {url}")
        return body

    def submit_order(self, signed_order: SignedOrder) -> str:
        """
        Submit a signed order.

        Returns:
            Order hash accepted by the API
        """
        data = self._request(
            "POST", payload=signed_order.to_dict(), order_hash=signed_order.order_hash
        )
        return data.get("orderHash", signed_order.order_hash)

    def list_orders(self, filters: Optional[OrderFilters] = None) -> OrderPage:
        """
        List orders matching filters.

        Raises:
            OrderbookError: If the request fails or orders can't be parsed
        """
        filters = filters or OrderFilters()
        data = self._request("GET", params=filters.to_query_params())
        try:
            return OrderPage.from_dict(data)
        except (OrderValidationError, KeyError, TypeError, ValueError) as e:
            raise OrderbookApiError(f"Failed to parse orders from response: {e}") from e

    def get_order(self, order_hash: str) -> Optional[OrderRecord]:
        """Fetch one order by hash, or None if the API doesn't know it."""
        try:
            data = self._request("GET", f"/order/{order_hash}", order_hash=order_hash)
        except OrderNotFoundError:
            return None
        except OrderbookApiError as e:
            if str(e).startswith("HTTP 404"):
                return None
            raise
        try:
            return OrderRecord.from_dict(data)
        except OrderValidationError as e:
            raise OrderbookApiError(f"Failed to parse order from response: {e}") from e

    def mark_filled(self, order_hash: str, tx_hash: str) -> dict[str, Any]:
        """Mark an order as filled by settlement transaction `tx_hash`."""
        return self._request(
            "POST",
            "/fill",
            payload={"orderHash": order_hash, "txHash": tx_hash},
            order_hash=order_hash,
        )

    def cancel_order(self, order_hash: str) -> dict[str, Any]:
        """Cancel an order in the API."""
        return self._request(
            "POST", "/cancel", payload={"orderHash": order_hash}, order_hash=order_hash
        )

    def cleanup_expired(self) -> int:
        """
        Trigger a cleanup sweep.

        Returns:
            Number of orders removed
        """
        data = self._request("POST", "/cleanup", payload={})
        try:
            return int(data["cleaned"])
        except (KeyError, TypeError, ValueError) as e:
            raise OrderbookApiError(f"Failed to parse cleanup response: {e}") from e
