"""
REST Implementation of the Remote Service

Talks to the expense backend over HTTP with httpx.

TRADEOFFS:
- A fresh AsyncClient per call. The UI drives each call from its own event
  loop, and a pooled client cannot outlive the loop it was created on.
- Only the listing (an idempotent GET) is retried on transport errors.
  Retrying a POST could create the same expense twice.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.config import ExpenseApiSettings, get_settings
from expense_tracker.models.expense import ExpenseId, ExpensePayload, MutationResult
from expense_tracker.services.remote.interface import (
    ExpenseServiceInterface,
    NotFoundError,
    ServiceConnectionError,
    ServiceResponseError,
    classify_response,
)


class HttpExpenseService(ExpenseServiceInterface):
    """
    httpx-backed client for the expense REST API.

    Endpoint paths come from ExpenseApiSettings; a custom transport can be
    injected (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        settings: Optional[ExpenseApiSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or get_settings().expense_api
        self._transport = transport
        self._logger = structlog.get_logger(__name__)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        )

    def _path_for(self, template: str, expense_id: ExpenseId) -> str:
        return template.format(id=quote(str(expense_id), safe=""))

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        """Send one request, mapping httpx failures onto service errors."""
        self._logger.debug("expense_api_request", method=method, path=path)
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error_cls = NotFoundError if status == 404 else ServiceResponseError
            raise error_cls(
                f"{method} {path} failed with status {status}",
                detail=e.response.text or None,
                status_code=status,
            ) from e
        except httpx.TransportError as e:
            raise ServiceConnectionError(
                f"Could not reach expense service: {e}"
            ) from e
        except httpx.HTTPError as e:
            # Undecodable bodies, redirect loops
            raise ServiceResponseError(
                f"{method} {path} returned an unusable response: {e}"
            ) from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """JSON body if there is one, otherwise the plain text (or None)."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def list_expenses(self) -> list[Any]:
        """Fetch every record, retrying transport failures."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.list_retry_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(ServiceConnectionError),
            reraise=True,
        ):
            with attempt:
                response = await self._request("GET", self._settings.list_path)

        body = self._decode(response)
        if not isinstance(body, list):
            raise ServiceResponseError(
                "Expense listing is not a list",
                detail=str(body) if body is not None else None,
                status_code=response.status_code,
            )
        return body

    async def create_expense(self, payload: ExpensePayload) -> MutationResult:
        response = await self._request(
            "POST",
            self._settings.create_path,
            json=payload.to_wire(),
        )
        return classify_response(self._decode(response))

    async def update_expense(
        self,
        expense_id: ExpenseId,
        payload: ExpensePayload,
    ) -> MutationResult:
        response = await self._request(
            "PUT",
            self._path_for(self._settings.update_path, expense_id),
            json=payload.to_wire(),
        )
        return classify_response(self._decode(response))

    async def delete_expense(self, expense_id: ExpenseId) -> None:
        await self._request(
            "DELETE",
            self._path_for(self._settings.delete_path, expense_id),
        )
