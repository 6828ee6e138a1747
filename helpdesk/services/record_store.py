from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

logger = logging.getLogger(__name__)


class RecordStoreError(RuntimeError):
    """Raised when the record store rejects or fails a request."""

    def __init__(self, message: str, *, status_code: int | None = None, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:
        prefix = f"[{self.status_code}] " if self.status_code is not None else ""
        return f"{prefix}{super().__str__()}"


class RecordNotFoundError(RecordStoreError):
    """Raised when the requested document does not exist."""


def _extract_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"API error: {response.status_code} {response.reason_phrase}"

    if isinstance(data, Mapping):
        for key in ("message", "detail"):
            value = data.get(key)
            if isinstance(value, str):
                return value
    return f"API error: {response.status_code} {response.reason_phrase}"


@dataclass(slots=True)
class RecordStoreClient:
    """Async client for the JSON-document record store."""

    base_url: str
    token: str | None = None
    timeout: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = field(default=None, init=False, repr=False)

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url.rstrip("/"),
                timeout=self.timeout,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers: dict[str, str] = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        headers.update(kwargs.pop("headers", {}))

        client = self._ensure_client()
        try:
            response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Record store request %s %s failed: %s", method, path, exc)
            raise RecordStoreError(f"Record store request failed: {exc}") from exc

        if response.status_code == 404:
            raise RecordNotFoundError(_extract_error_message(response), status_code=404, response=response)
        if response.status_code >= 400:
            message = _extract_error_message(response)
            logger.warning("Record store rejected %s %s: %s", method, path, message)
            raise RecordStoreError(message, status_code=response.status_code, response=response)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def list(self, collection: str, params: Mapping[str, str] | None = None) -> list[dict[str, Any]]:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        data = await self._request("GET", f"/{collection}", params=query)
        return list(data or [])

    async def get(self, collection: str, document_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/{collection}/{document_id}")

    async def create(self, collection: str, document: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/{collection}", json=dict(document))

    async def replace(self, collection: str, document_id: str, document: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/{collection}/{document_id}", json=dict(document))

    async def patch(self, collection: str, document_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"/{collection}/{document_id}", json=dict(changes))

    async def delete(self, collection: str, document_id: str) -> None:
        await self._request("DELETE", f"/{collection}/{document_id}")
