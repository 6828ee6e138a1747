from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from helpdesk.dependencies.auth import AdminUser
from helpdesk.dependencies.services import UserServiceDep
from helpdesk.services.auth import Role
from helpdesk.services.users import UserFilters, UserNotFoundError

router = APIRouter(prefix="/users", tags=["users"])


class UserRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: Role
    avatar: str | None = None
    is_active: bool = True
    password: str | None = None
    confirm_password: str | None = None

    @model_validator(mode="after")
    def passwords_match(self) -> "UserRequest":
        if self.password is not None and self.password != self.confirm_password:
            raise ValueError("Password confirmation does not match")
        return self

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"password", "confirm_password"})


class UserStatusRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_active: bool


@router.get("", summary="List users")
async def list_users(
    service: UserServiceDep,
    _: AdminUser,
    q: str | None = Query(default=None),
    role: Role | None = Query(default=None),
    is_active: bool | None = Query(default=None, alias="isActive"),
) -> list[dict[str, Any]]:
    filters = UserFilters(search=q, role=role.value if role else None, is_active=is_active)
    return await service.list_users(filters)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserRequest, service: UserServiceDep, _: AdminUser) -> dict[str, Any]:
    return await service.create_user(payload.to_document())


@router.get("/{user_id}")
async def get_user(user_id: str, service: UserServiceDep, _: AdminUser) -> dict[str, Any]:
    try:
        return await service.get_user(user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.put("/{user_id}")
async def update_user(user_id: str, payload: UserRequest, service: UserServiceDep, _: AdminUser) -> dict[str, Any]:
    try:
        return await service.update_user(user_id, payload.to_document())
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.patch("/{user_id}/status")
async def set_user_status(
    user_id: str, payload: UserStatusRequest, service: UserServiceDep, _: AdminUser
) -> dict[str, Any]:
    try:
        return await service.set_active(user_id, payload.is_active)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, service: UserServiceDep, _: AdminUser) -> None:
    try:
        await service.delete_user(user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
