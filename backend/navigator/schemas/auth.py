"""
Auth request/response schemas.
"""
from datetime import datetime

from pydantic import EmailStr, field_validator

from navigator.schemas.base import CamelModel


def _password_length(v: str) -> str:
    if not v:
        raise ValueError("Password is required")
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes (bcrypt limit)")
    return v


class RegisterRequest(CamelModel):
    name: str
    email: EmailStr
    password: str
    organization: str | None = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _password_length(v)

    @field_validator("organization")
    @classmethod
    def organization_blank_is_none(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        return v or None


class LoginRequest(CamelModel):
    # plain str: a malformed email must get the same 401 as an unknown one
    email: str
    password: str


class PromoteRequest(CamelModel):
    email: str


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: str
    organization: str | None = None
    organization_id: str | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None


class AuthResponse(CamelModel):
    message: str
    user: UserResponse
    token: str


class VerifyResponse(CamelModel):
    user: UserResponse


class HealthResponse(CamelModel):
    status: str
    timestamp: str
