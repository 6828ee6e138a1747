from datetime import datetime, timezone

import pytest

from helpdesk.services.auth import (
    AuthenticationError,
    AuthService,
    AuthUser,
    Role,
    actor_for,
    issue_token,
    user_id_from_token,
)

LOGIN_TIME = datetime(2024, 3, 5, 7, 30, tzinfo=timezone.utc)


@pytest.fixture
def seeded_users(store_database):
    store_database.insert(
        "users",
        {"id": "u-1", "name": "Admin", "email": "admin@example.com", "username": "admin", "role": "admin"},
    )
    store_database.insert(
        "users",
        {"id": "u-2", "name": "Rina CS", "email": "rina@example.com", "username": "rina", "role": "cs"},
    )
    return store_database


@pytest.mark.asyncio
async def test_login_issues_token_and_records_last_login(seeded_users, store_client):
    service = AuthService(store_client, clock=lambda: LOGIN_TIME)

    result = await service.login("rina@example.com", "password")

    assert result.token == "demo_token_u-2"
    assert result.user.role is Role.CS
    assert seeded_users.get("users", "u-2")["lastLogin"] == "2024-03-05T07:30:00.000Z"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email, password",
    [("rina@example.com", "wrong"), ("nobody@example.com", "password")],
)
async def test_login_rejects_bad_credentials(seeded_users, store_client, email, password):
    service = AuthService(store_client)

    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        await service.login(email, password)


@pytest.mark.asyncio
async def test_resolve_token(seeded_users, store_client):
    service = AuthService(store_client)

    user = await service.resolve_token(issue_token("u-1"))

    assert user == AuthUser(id="u-1", name="Admin", email="admin@example.com", role=Role.ADMIN, username="admin")
    assert await service.resolve_token("demo_token_u-404") is None
    assert await service.resolve_token("Bearer something") is None


@pytest.mark.asyncio
async def test_register_defaults_to_customer_service(store_client):
    service = AuthService(store_client)

    user = await service.register(name="Dewi", email="dewi@example.com")

    assert user.role is Role.CS
    assert user.username == "dewi"
    assert (await service.resolve_token(issue_token(user.id))) == user


def test_user_id_from_token():
    assert user_id_from_token("demo_token_abc") == "abc"
    assert user_id_from_token("demo_token_") is None
    assert user_id_from_token(None) is None


def test_actor_for_unknown_user_is_system():
    assert actor_for(None).id == "system"
    assert actor_for(AuthUser(id="u-2", name="", email="", role=Role.CS)).name == "u-2"
