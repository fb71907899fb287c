"""Tests for OrderbookApiClient HTTP interactions using mocks."""

from unittest.mock import patch

import pytest
import requests

from options_orderbook.api_client import OrderbookApiClient
from options_orderbook.errors import (
    DuplicateOrderError,
    OrderAlreadyFilledError,
    OrderbookApiError,
    SaltExtensionMismatchError,
)
from options_orderbook.types import OrderFilters, OrderPage, OrderStatus, SignedOrder

API_URL = "http://localhost:3000/api/orders"


class MockResponse:
    """Mock requests response."""

    def __init__(self, json_data=None, status_code=200, text=""):
        self._json_data = json_data
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json_data is None:
            raise ValueError("No JSON body")
        return self._json_data


@pytest.fixture
def api_client():
    return OrderbookApiClient(api_url=API_URL + "/", timeout=5)


@pytest.fixture
def signed_order(make_built_order, signer):
    built = make_built_order(maker=signer.address)
    return SignedOrder(
        order=built.order,
        extension=built.extension,
        order_hash=built.order_hash,
        signature=signer.sign(built.order),
    )


def _patch_request(*responses):
    return patch(
        "options_orderbook.api_client.requests.request", side_effect=list(responses)
    )


class TestSubmitOrder:
    """Tests for order submission."""

    def test_posts_signed_order(self, api_client, signed_order):
        with _patch_request(MockResponse({"orderHash": signed_order.order_hash})) as mock_request:
            order_hash = api_client.submit_order(signed_order)

        assert order_hash == signed_order.order_hash
        args, kwargs = mock_request.call_args
        assert args == ("POST", API_URL)
        assert kwargs["json"] == signed_order.to_dict()
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["Content-Type"] == "application/json"

    def test_known_error_code_maps_to_class(self, api_client, signed_order):
        body = {"error": "salt does not bind extension", "code": "SALT_EXTENSION_MISMATCH"}

        with _patch_request(MockResponse(body, status_code=400)):
            with pytest.raises(SaltExtensionMismatchError) as exc_info:
                api_client.submit_order(signed_order)

        assert "HTTP 400" in str(exc_info.value)

    def test_duplicate_keeps_order_hash(self, api_client, signed_order):
        body = {"error": "exists", "code": "DUPLICATE_ORDER"}

        with _patch_request(MockResponse(body, status_code=409)):
            with pytest.raises(DuplicateOrderError) as exc_info:
                api_client.submit_order(signed_order)

        assert exc_info.value.order_hash == signed_order.order_hash

    def test_unknown_error_code(self, api_client, signed_order):
        with _patch_request(MockResponse({"error": "boom"}, status_code=500)):
            with pytest.raises(OrderbookApiError, match="HTTP 500: boom"):
                api_client.submit_order(signed_order)

    def test_non_json_error(self, api_client, signed_order):
        with _patch_request(MockResponse(None, status_code=502, text="Bad Gateway")):
            with pytest.raises(OrderbookApiError, match="Bad Gateway"):
                api_client.submit_order(signed_order)

    def test_connection_error(self, api_client, signed_order):
        with _patch_request(requests.exceptions.ConnectionError("refused")):
            with pytest.raises(OrderbookApiError, match="Request failed"):
                api_client.submit_order(signed_order)


class TestQueries:
    """Tests for listing and fetching orders."""

    def test_list_orders(self, api_client, store, insert_order):
        record = insert_order()
        page = OrderPage(records=[record], total=1, limit=10, offset=0)

        with _patch_request(MockResponse(page.to_dict())) as mock_request:
            result = api_client.list_orders(OrderFilters(active=True, limit=10))

        assert result.total == 1
        assert result.records[0].order_hash == record.order_hash
        assert result.records[0].order == record.order
        assert result.records[0].status == OrderStatus.ACTIVE
        params = mock_request.call_args.kwargs["params"]
        assert params["active"] == "true"
        assert params["limit"] == "10"

    def test_list_orders_unparseable(self, api_client):
        with _patch_request(MockResponse({"orders": [{"orderHash": "0x1"}]})):
            with pytest.raises(OrderbookApiError, match="Failed to parse orders"):
                api_client.list_orders()

    def test_get_order_unparseable(self, api_client):
        with _patch_request(MockResponse({"orderHash": "0x1", "order": {}})):
            with pytest.raises(OrderbookApiError, match="Failed to parse order"):
                api_client.get_order("0x1")

    def test_get_order(self, api_client, insert_order):
        record = insert_order()

        with _patch_request(MockResponse(record.to_dict())) as mock_request:
            result = api_client.get_order(record.order_hash)

        assert result.order_hash == record.order_hash
        assert result.created_at == record.created_at
        assert mock_request.call_args.args == ("GET", f"{API_URL}/order/{record.order_hash}")

    def test_get_order_not_found_code(self, api_client):
        body = {"error": "missing", "code": "ORDER_NOT_FOUND"}

        with _patch_request(MockResponse(body, status_code=404)):
            assert api_client.get_order("0x" + "00" * 32) is None

    def test_get_order_plain_404(self, api_client):
        with _patch_request(MockResponse(None, status_code=404, text="Not Found")):
            assert api_client.get_order("0x" + "00" * 32) is None

    def test_get_order_server_error(self, api_client):
        with _patch_request(MockResponse(None, status_code=500, text="oops")):
            with pytest.raises(OrderbookApiError):
                api_client.get_order("0x" + "00" * 32)


class TestLifecycleActions:
    """Tests for fill, cancel and cleanup endpoints."""

    def test_mark_filled(self, api_client):
        order_hash = "0x" + "aa" * 32

        with _patch_request(MockResponse({"ok": True})) as mock_request:
            api_client.mark_filled(order_hash, "0xtx")

        args, kwargs = mock_request.call_args
        assert args == ("POST", f"{API_URL}/fill")
        assert kwargs["json"] == {"orderHash": order_hash, "txHash": "0xtx"}

    def test_mark_filled_twice(self, api_client):
        body = {"error": "already filled", "code": "ORDER_ALREADY_FILLED"}

        with _patch_request(MockResponse(body, status_code=409)):
            with pytest.raises(OrderAlreadyFilledError):
                api_client.mark_filled("0x" + "aa" * 32, "0xtx")

    def test_cancel_order(self, api_client):
        with _patch_request(MockResponse({"ok": True})) as mock_request:
            api_client.cancel_order("0x" + "bb" * 32)

        assert mock_request.call_args.args == ("POST", f"{API_URL}/cancel")

    def test_cleanup_expired(self, api_client):
        with _patch_request(MockResponse({"cleaned": 3})):
            assert api_client.cleanup_expired() == 3

    def test_cleanup_bad_response(self, api_client):
        with _patch_request(MockResponse({"unexpected": True})):
            with pytest.raises(OrderbookApiError):
                api_client.cleanup_expired()
