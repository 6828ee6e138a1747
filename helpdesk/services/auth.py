"""Mock identity provider backed by the ``users`` collection.

Passwords are compared in plaintext against a single demo password and tokens
are predictable ``demo_token_<userId>`` strings. This mirrors the mock store
and is not meant to protect anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping

from helpdesk.core.timestamps import format_timestamp, utcnow
from helpdesk.tickets.models import Actor

from .record_store import RecordNotFoundError, RecordStoreClient

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "demo_token_"
USERS = "users"


class Role(str, Enum):
    """Supported roles."""

    ADMIN = "admin"
    CS = "cs"
    NOC = "noc"


class AuthenticationError(RuntimeError):
    """Raised when credentials do not match a known user."""


@dataclass(frozen=True, slots=True)
class AuthUser:
    id: str
    name: str
    email: str
    role: Role
    username: str | None = None

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "AuthUser":
        return cls(
            id=str(document["id"]),
            name=str(document.get("name", "")),
            email=str(document.get("email", "")),
            role=Role(str(document.get("role") or Role.CS.value)),
            username=document.get("username"),
        )


@dataclass(frozen=True, slots=True)
class LoginResult:
    user: AuthUser
    token: str


def issue_token(user_id: str) -> str:
    return f"{TOKEN_PREFIX}{user_id}"


def user_id_from_token(token: str | None) -> str | None:
    if not token or not token.startswith(TOKEN_PREFIX):
        return None
    user_id = token[len(TOKEN_PREFIX):]
    return user_id or None


def actor_for(user: AuthUser | None) -> Actor:
    """Attribute an action to ``user``, or to the system identity when unknown."""

    if user is None or not user.id:
        return Actor.system()
    return Actor(id=user.id, name=user.name or user.id)


class AuthService:
    def __init__(
        self,
        client: RecordStoreClient,
        *,
        demo_password: str = "password",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._client = client
        self._demo_password = demo_password
        self._clock = clock

    async def login(self, email: str, password: str) -> LoginResult:
        users = await self._client.list(USERS, {"email": email})
        if not users or password != self._demo_password:
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError("Invalid email or password")

        document = users[0]
        await self._client.patch(USERS, str(document["id"]), {"lastLogin": format_timestamp(self._clock())})
        user = AuthUser.from_document(document)
        logger.info("User %s signed in", user.id)
        return LoginResult(user=user, token=issue_token(user.id))

    async def register(self, *, name: str, email: str, role: Role = Role.CS) -> AuthUser:
        document = await self._client.create(
            USERS,
            {
                "name": name,
                "email": email,
                "username": email.split("@")[0],
                "role": role.value,
                "isActive": True,
            },
        )
        return AuthUser.from_document(document)

    async def resolve_token(self, token: str | None) -> AuthUser | None:
        user_id = user_id_from_token(token)
        if user_id is None:
            return None
        try:
            document = await self._client.get(USERS, user_id)
        except RecordNotFoundError:
            return None
        return AuthUser.from_document(document)
