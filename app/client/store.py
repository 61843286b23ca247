"""
HTTP client for the table API (the remote collection store).

One instance per table ("articles", "experiments", "learning-entries").
Supports select-all with server-side ordering, select-by-key, insert,
update-by-key and delete-by-key; every mutation returns the stored row.

Errors:
- StoreUnavailableError: no store URL configured, or the store cannot be
  reached (connection refused, DNS failure, timeout)
- StoreNotFoundError: 404 for the requested key
- StoreError: any other non-2xx answer, or a 2xx whose body is not JSON
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from app.core.config import settings
from app.core.errors import StoreError, StoreNotFoundError, StoreUnavailableError

logger = structlog.get_logger(__name__)


def _to_payload(values: Any) -> Any:
    if isinstance(values, BaseModel):
        return values.model_dump(mode="json", exclude_unset=True)
    return to_jsonable_python(values)


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if detail is None:
        detail = response.text[:200] or response.reason_phrase
    return f"{response.status_code}: {detail}"


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise StoreError(
            f"Invalid response body: {response.text[:100]!r}", status_code=response.status_code
        ) from e


class CollectionStore:
    """Typed-table client for one collection of the table API."""

    def __init__(
        self,
        table: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.table = table
        self.base_url = base_url if base_url is not None else settings.STORE_URL
        self.timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=(self.base_url or "").rstrip("/"),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self.base_url:
            raise StoreUnavailableError("Collection store URL is not configured")

        url = f"/{self.table}{path}"
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.warning("Collection store unreachable", table=self.table, method=method, error=str(e))
            raise StoreUnavailableError(f"Collection store unreachable: {e}") from e

        if response.status_code == 404:
            raise StoreNotFoundError(_error_detail(response), status_code=404)
        if not response.is_success:
            logger.warning(
                "Collection store request failed",
                table=self.table,
                method=method,
                status_code=response.status_code,
            )
            raise StoreError(_error_detail(response), status_code=response.status_code)
        return response

    async def select_all(self, **params: Any) -> List[Dict[str, Any]]:
        response = await self._request("GET", "", params=params or None)
        return _json(response)

    async def select_one(self, key: str) -> Dict[str, Any]:
        response = await self._request("GET", f"/{key}")
        return _json(response)

    async def insert(self, values: Any) -> Dict[str, Any]:
        response = await self._request("POST", "", json=_to_payload(values))
        return _json(response)

    async def update(self, key: str, values: Any) -> Dict[str, Any]:
        response = await self._request("PATCH", f"/{key}", json=_to_payload(values))
        return _json(response)

    async def delete(self, key: str) -> None:
        await self._request("DELETE", f"/{key}")
