from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from helpdesk.services.auth import AuthService, AuthUser, Role, actor_for
from helpdesk.tickets.models import Actor

bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Auth service is not configured")
    return service


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthUser:
    """Resolve the signed-in user from the demo bearer token."""

    cached = getattr(request.state, "user", None)
    if isinstance(cached, AuthUser):
        return cached

    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await auth_service.resolve_token(credentials.credentials)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")
    request.state.user = user
    return user


def role_required(*roles: Role) -> Callable[[AuthUser], AuthUser]:
    """Dependency factory ensuring the current user holds one of ``roles``."""

    async def dependency(user: Annotated[AuthUser, Depends(get_current_user)]) -> AuthUser:
        if not user.has_role(*roles):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency


require_any_role = role_required(Role.ADMIN, Role.CS, Role.NOC)
require_agent = role_required(Role.ADMIN, Role.CS)
require_admin = role_required(Role.ADMIN)

CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
AnyUser = Annotated[AuthUser, Depends(require_any_role)]
AgentUser = Annotated[AuthUser, Depends(require_agent)]
AdminUser = Annotated[AuthUser, Depends(require_admin)]


def current_actor(user: AgentUser) -> Actor:
    return actor_for(user)


ActorDep = Annotated[Actor, Depends(current_actor)]


def current_any_actor(user: AnyUser) -> Actor:
    """Actor for actions open to every role, such as moving a ticket along."""

    return actor_for(user)


AnyActorDep = Annotated[Actor, Depends(current_any_actor)]
