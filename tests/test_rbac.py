import pytest
from fastapi import HTTPException

from helpdesk.dependencies.auth import current_actor, current_any_actor, role_required
from helpdesk.services.auth import AuthUser, Role


def _user(role: Role) -> AuthUser:
    return AuthUser(id="u-7", name="Andi", email="andi@example.com", role=role)


@pytest.mark.asyncio
async def test_role_required_allows_authorized_user():
    dependency = role_required(Role.ADMIN, Role.CS)
    result = await dependency(_user(Role.CS))  # type: ignore[arg-type]
    assert result.id == "u-7"


@pytest.mark.asyncio
async def test_role_required_rejects_unauthorized_user():
    dependency = role_required(Role.ADMIN, Role.CS)
    with pytest.raises(HTTPException) as exc:
        await dependency(_user(Role.NOC))  # type: ignore[arg-type]

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"


def test_current_actor_uses_signed_in_user():
    actor = current_actor(_user(Role.ADMIN))

    assert (actor.id, actor.name) == ("u-7", "Andi")


def test_any_role_actor_includes_noc():
    actor = current_any_actor(_user(Role.NOC))

    assert actor.id == "u-7"
