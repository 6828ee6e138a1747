from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .record_store import RecordNotFoundError, RecordStoreClient

CUSTOMERS = "customers"


class CustomerNotFoundError(RuntimeError):
    """Raised when a customer could not be located."""


@dataclass(slots=True)
class CustomerFilters:
    search: str | None = None
    status: str | None = None
    service_type: str | None = None
    city: str | None = None

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.search:
            params["q"] = self.search
        # "all" is the list view's catch-all option, not a stored status.
        if self.status and self.status != "all":
            params["status"] = self.status
        if self.service_type:
            params["serviceType"] = self.service_type
        if self.city:
            params["city"] = self.city
        return params


class CustomerService:
    """CRUD over the ``customers`` collection."""

    def __init__(self, client: RecordStoreClient) -> None:
        self._client = client

    async def list_customers(self, filters: CustomerFilters | None = None) -> list[dict[str, Any]]:
        return await self._client.list(CUSTOMERS, filters.to_query_params() if filters else {})

    async def get_customer(self, customer_id: str) -> dict[str, Any]:
        try:
            return await self._client.get(CUSTOMERS, customer_id)
        except RecordNotFoundError as exc:
            raise CustomerNotFoundError(f"Customer {customer_id} not found") from exc

    async def create_customer(self, data: Mapping[str, Any]) -> dict[str, Any]:
        payload = {key: value for key, value in data.items() if key != "id"}
        return await self._client.create(CUSTOMERS, payload)

    async def update_customer(self, customer_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        # A client echoing a fetched record back must not pin its old updatedAt.
        payload = {key: value for key, value in data.items() if key != "updatedAt"}
        try:
            return await self._client.replace(CUSTOMERS, customer_id, {**payload, "id": customer_id})
        except RecordNotFoundError as exc:
            raise CustomerNotFoundError(f"Customer {customer_id} not found") from exc

    async def delete_customer(self, customer_id: str) -> None:
        try:
            await self._client.delete(CUSTOMERS, customer_id)
        except RecordNotFoundError as exc:
            raise CustomerNotFoundError(f"Customer {customer_id} not found") from exc

    async def tickets_for(self, customer_id: str) -> list[dict[str, Any]]:
        return await self._client.list("tickets", {"customerId": customer_id})
