from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from helpdesk.dependencies.auth import CurrentUser, get_auth_service
from helpdesk.services.auth import AuthenticationError, AuthService, AuthUser, Role

router = APIRouter(prefix="/auth", tags=["auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    # Accepted for form compatibility; never stored.
    password: str | None = None
    role: Role = Role.CS


class AuthUserModel(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    username: str | None = None

    @classmethod
    def from_user(cls, user: AuthUser) -> "AuthUserModel":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role, username=user.username)


class LoginResponse(BaseModel):
    user: AuthUserModel
    token: str


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, service: AuthServiceDep) -> LoginResponse:
    try:
        result = await service.login(payload.email, payload.password)
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return LoginResponse(user=AuthUserModel.from_user(result.user), token=result.token)


@router.get("/me", response_model=AuthUserModel)
async def me(user: CurrentUser) -> AuthUserModel:
    return AuthUserModel.from_user(user)


@router.post("/register", response_model=AuthUserModel, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, service: AuthServiceDep) -> AuthUserModel:
    user = await service.register(name=payload.name, email=payload.email, role=payload.role)
    return AuthUserModel.from_user(user)
