"""
Tests for the remote service implementations.

The REST client is driven through httpx.MockTransport, so no network is
needed.
"""

import asyncio
import datetime as dt
import json
from decimal import Decimal

import httpx
import pytest

from expense_tracker.config import ExpenseApiSettings
from expense_tracker.models.expense import Ack, ExpenseDraft, ExpensePayload, FullRecord
from expense_tracker.orchestrator import LOAD_ERROR_MESSAGE, ReconciliationController
from expense_tracker.services.remote import (
    HttpExpenseService,
    InMemoryExpenseService,
    NotFoundError,
    ServiceConnectionError,
    ServiceResponseError,
    classify_response,
)


@pytest.fixture
def api_settings():
    return ExpenseApiSettings(base_url="http://api.test/api", list_retry_attempts=1)


@pytest.fixture
def payload():
    draft = ExpenseDraft(
        title="Lunch",
        category="Food",
        amount=Decimal("12.50"),
        date=dt.date(2024, 3, 10),
        note="team",
    )
    return ExpensePayload.from_draft(draft)


class Recorder:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def _service(api_settings, handler):
    return HttpExpenseService(settings=api_settings, transport=httpx.MockTransport(handler))


def _corrupt_gzip(request):
    return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip")


class TestClassifyResponse:
    """Tests for response-shape detection."""

    def test_entity_with_identifier(self):
        """Test that an object carrying an id is a full record."""
        result = classify_response({"id": 3, "title": "Tea"})
        assert isinstance(result, FullRecord)
        assert result.record["title"] == "Tea"

    def test_entity_with_secondary_identifier(self):
        """Test that `expenseId` also counts."""
        assert isinstance(classify_response({"expenseId": "x"}), FullRecord)

    @pytest.mark.parametrize("body", [None, "", {}, {"id": None}, [1, 2]])
    def test_acknowledgements(self, body):
        """Test that anything without a usable identifier is an ack."""
        assert isinstance(classify_response(body), Ack)

    def test_ack_keeps_message(self):
        """Test that a text body is kept as the ack detail."""
        assert classify_response("Expense added successfully").detail == "Expense added successfully"


class TestPayload:
    """Tests for the wire body."""

    def test_wire_shape(self, payload):
        """Test field names and JSON types sent to the backend."""
        assert payload.to_wire() == {
            "title": "Lunch",
            "category": "Food",
            "amount": 12.5,
            "note": "team",
            "expenseDate": "2024-03-10",
        }

    def test_update_carries_id(self, payload):
        """Test that an update body includes the identifier."""
        body = ExpensePayload.from_draft(
            ExpenseDraft(title="Lunch", amount=Decimal("1"), date=dt.date(2024, 3, 10)),
            expense_id=7,
        ).to_wire()
        assert body["id"] == 7


class TestHttpExpenseService:
    """Tests for the REST client."""

    def test_list(self, api_settings):
        """Test the listing endpoint and raw passthrough."""
        recorder = Recorder(httpx.Response(200, json=[{"id": 1}, {"title": "x"}]))
        service = _service(api_settings, recorder)

        records = asyncio.run(service.list_expenses())

        assert records == [{"id": 1}, {"title": "x"}]
        request = recorder.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "http://api.test/api/getExpenses"

    def test_list_rejects_non_list(self, api_settings):
        """Test that an object instead of an array is an error."""
        service = _service(api_settings, Recorder(httpx.Response(200, json={"id": 1})))
        with pytest.raises(ServiceResponseError):
            asyncio.run(service.list_expenses())

    def test_create_posts_payload(self, api_settings, payload):
        """Test the create endpoint and JSON body."""
        recorder = Recorder(httpx.Response(200, json={"id": 9, "title": "Lunch"}))
        service = _service(api_settings, recorder)

        result = asyncio.run(service.create_expense(payload))

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/addExpense"
        assert json.loads(request.content) == {
            "title": "Lunch",
            "category": "Food",
            "amount": 12.5,
            "note": "team",
            "expenseDate": "2024-03-10",
        }
        assert isinstance(result, FullRecord)
        assert result.record["id"] == 9

    def test_create_text_acknowledgement(self, api_settings, payload):
        """Test that a plain-text success body is an ack."""
        service = _service(api_settings, Recorder(httpx.Response(200, text="Expense added successfully")))
        result = asyncio.run(service.create_expense(payload))

        assert isinstance(result, Ack)
        assert result.detail == "Expense added successfully"

    def test_update_uses_identifier_path(self, api_settings, payload):
        """Test the update endpoint."""
        recorder = Recorder(httpx.Response(204))
        service = _service(api_settings, recorder)

        result = asyncio.run(service.update_expense(5, payload))

        request = recorder.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/expenses/5"
        assert isinstance(result, Ack)
        assert result.detail is None

    def test_delete_uses_identifier_path(self, api_settings):
        """Test the delete endpoint."""
        recorder = Recorder(httpx.Response(200, text="Expense deleted"))
        service = _service(api_settings, recorder)

        assert asyncio.run(service.delete_expense("abc")) is None
        assert recorder.requests[0].method == "DELETE"
        assert recorder.requests[0].url.path == "/api/delete/abc"

    def test_server_error_keeps_detail(self, api_settings, payload):
        """Test that the error body is surfaced as the detail."""
        service = _service(api_settings, Recorder(httpx.Response(500, text="Amount too large")))

        with pytest.raises(ServiceResponseError) as exc_info:
            asyncio.run(service.update_expense(5, payload))

        assert exc_info.value.detail == "Amount too large"
        assert exc_info.value.status_code == 500

    def test_not_found(self, api_settings):
        """Test that 404 maps to NotFoundError."""
        service = _service(api_settings, Recorder(httpx.Response(404)))

        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(service.delete_expense(99))
        assert exc_info.value.detail is None

    def test_connection_error(self, api_settings):
        """Test that transport failures map to ServiceConnectionError."""
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(api_settings, refuse)

        with pytest.raises(ServiceConnectionError):
            asyncio.run(service.list_expenses())

    def test_undecodable_body(self, api_settings):
        """Test that a body httpx cannot decode maps to ServiceResponseError."""
        service = _service(api_settings, _corrupt_gzip)

        with pytest.raises(ServiceResponseError):
            asyncio.run(service.list_expenses())
        with pytest.raises(ServiceResponseError):
            asyncio.run(service.delete_expense(1))

    def test_undecodable_body_fails_load(self, api_settings):
        """Test that the controller reports an undecodable listing as a load error."""
        controller = ReconciliationController(service=_service(api_settings, _corrupt_gzip))

        assert asyncio.run(controller.load()) is False
        assert controller.state.error == LOAD_ERROR_MESSAGE
        assert controller.state.expenses == ()

    def test_mutations_are_not_retried(self, payload):
        """Test that a failed create is sent exactly once."""
        settings = ExpenseApiSettings(base_url="http://api.test/api/", list_retry_attempts=3)
        attempts = []

        def refuse(request):
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        service = HttpExpenseService(settings=settings, transport=httpx.MockTransport(refuse))

        with pytest.raises(ServiceConnectionError):
            asyncio.run(service.create_expense(payload))
        assert len(attempts) == 1


class TestInMemoryExpenseService:
    """Tests for the in-memory stand-in."""

    def test_create_assigns_next_id(self, service, payload):
        """Test identifier assignment and the echoed entity."""
        result = asyncio.run(service.create_expense(payload))

        assert isinstance(result, FullRecord)
        assert result.record["id"] == 4
        assert result.record["expenseDate"] == "2024-03-10"
        assert "timestamp" in result.record

    def test_ack_mode(self, raw_records, payload):
        """Test that echo can be turned off."""
        service = InMemoryExpenseService(records=raw_records, echo_entities=False)
        result = asyncio.run(service.create_expense(payload))

        assert isinstance(result, Ack)
        assert len(asyncio.run(service.list_expenses())) == len(raw_records) + 1

    def test_update_missing_record(self, service, payload):
        """Test that unknown identifiers raise NotFoundError."""
        with pytest.raises(NotFoundError):
            asyncio.run(service.update_expense(404, payload))

    def test_delete(self, service):
        """Test removal."""
        asyncio.run(service.delete_expense(2))
        ids = [r.get("id") for r in asyncio.run(service.list_expenses())]
        assert 2 not in ids

    def test_injected_failure(self, service):
        """Test that fail() makes an operation raise."""
        service.fail("list", ServiceConnectionError("down"))
        with pytest.raises(ServiceConnectionError):
            asyncio.run(service.list_expenses())
        assert service.calls == ["list"]

    def test_listing_returns_copies(self, service):
        """Test that callers cannot mutate stored records."""
        first = asyncio.run(service.list_expenses())
        first[0]["title"] = "changed"
        assert asyncio.run(service.list_expenses())[0]["title"] == "Bus pass"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
