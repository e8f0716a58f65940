"""Authentication endpoints: sign-in-or-register and principal lookup."""

import re

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field, field_validator

from src.accounts.api.http.deps import (
    get_current_principal,
    get_signin_or_register_use_case,
)
from src.accounts.core.services import Principal
from src.accounts.core.use_cases import SigninOrRegisterInput, SigninOrRegisterUseCase
from src.accounts.entities.core.user import UserRole

router = APIRouter(prefix="/auth", tags=["auth"])

_PASSWORD_RULES = (
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"[0-9]", "Password must contain at least one number"),
    (r"[^A-Za-z0-9]", "Password must contain at least one special character"),
)


class SigninOrRegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    role: UserRole | None = None

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        for pattern, message in _PASSWORD_RULES:
            if not re.search(pattern, value):
                raise ValueError(message)
        return value


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    is_onboarded: bool


class PrincipalResponse(BaseModel):
    id: str
    roles: list[str]


@router.post("/signin-or-register", response_model=TokenPairResponse)
async def signin_or_register(
    body: SigninOrRegisterRequest,
    response: Response,
    use_case: SigninOrRegisterUseCase = Depends(get_signin_or_register_use_case),
) -> TokenPairResponse:
    """Sign in with email and password, registering the account on first use.

    Answers 201 when a new account was created and 200 for existing ones.
    """
    result = await use_case.execute(
        SigninOrRegisterInput(
            email=body.email, password=body.password, name=body.name, role=body.role
        )
    )

    if result.is_new_user:
        response.status_code = status.HTTP_201_CREATED

    return TokenPairResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        is_onboarded=result.is_onboarded,
    )


@router.get("/me", response_model=PrincipalResponse)
async def me(principal: Principal = Depends(get_current_principal)) -> PrincipalResponse:
    return PrincipalResponse(id=principal.internal_id, roles=principal.roles)
