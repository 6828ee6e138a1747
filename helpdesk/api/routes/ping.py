from fastapi import APIRouter

from helpdesk.dependencies.auth import AnyUser

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", summary="Public health probe")
async def ping() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/secure", summary="Authenticated health probe")
async def secure_ping(user: AnyUser) -> dict[str, str]:
    return {"status": "ok", "user": user.id}
