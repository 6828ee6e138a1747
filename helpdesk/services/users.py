from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .auth import USERS
from .record_store import RecordNotFoundError, RecordStoreClient

# Credentials never reach the store; the mock identity provider checks a
# shared demo password instead.
_CREDENTIAL_FIELDS = frozenset({"password", "confirmPassword"})


class UserNotFoundError(RuntimeError):
    """Raised when a user could not be located."""


@dataclass(slots=True)
class UserFilters:
    search: str | None = None
    role: str | None = None
    is_active: bool | None = None

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.search:
            params["q"] = self.search
        if self.role:
            params["role"] = self.role
        if self.is_active is not None:
            params["isActive"] = "true" if self.is_active else "false"
        return params


def _strip_credentials(data: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in _CREDENTIAL_FIELDS}


class UserService:
    """CRUD over the ``users`` collection."""

    def __init__(self, client: RecordStoreClient) -> None:
        self._client = client

    async def list_users(self, filters: UserFilters | None = None) -> list[dict[str, Any]]:
        documents = await self._client.list(USERS, filters.to_query_params() if filters else {})
        return [_strip_credentials(document) for document in documents]

    async def get_user(self, user_id: str) -> dict[str, Any]:
        try:
            return _strip_credentials(await self._client.get(USERS, user_id))
        except RecordNotFoundError as exc:
            raise UserNotFoundError(f"User {user_id} not found") from exc

    async def create_user(self, data: Mapping[str, Any]) -> dict[str, Any]:
        payload = _strip_credentials({key: value for key, value in data.items() if key != "id"})
        payload.setdefault("isActive", True)
        return _strip_credentials(await self._client.create(USERS, payload))

    async def update_user(self, user_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        current = await self.get_user(user_id)
        # Preserve server-managed fields the edit form does not send.
        payload = {
            **{key: current[key] for key in ("createdAt", "lastLogin") if key in current},
            **_strip_credentials(data),
            "id": user_id,
        }
        try:
            return _strip_credentials(await self._client.replace(USERS, user_id, payload))
        except RecordNotFoundError as exc:
            raise UserNotFoundError(f"User {user_id} not found") from exc

    async def set_active(self, user_id: str, is_active: bool) -> dict[str, Any]:
        try:
            return _strip_credentials(await self._client.patch(USERS, user_id, {"isActive": is_active}))
        except RecordNotFoundError as exc:
            raise UserNotFoundError(f"User {user_id} not found") from exc

    async def delete_user(self, user_id: str) -> None:
        try:
            await self._client.delete(USERS, user_id)
        except RecordNotFoundError as exc:
            raise UserNotFoundError(f"User {user_id} not found") from exc
