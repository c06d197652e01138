"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from swadrive.db.enums import Role


class RegisterRequest(BaseModel):
    """Registration request. Role defaults to customer."""

    full_name: str | None = Field(None, max_length=255)
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    password: str = Field(..., min_length=1, max_length=128)
    role: Role = Role.CUSTOMER

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(BaseModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class UserResponse(BaseModel):
    """Public user profile. Never includes the password hash."""

    user_id: int
    full_name: str | None = None
    email: str
    phone: str | None = None
    role: Role
    created_at: datetime | None = None


class RegisterResponse(BaseModel):
    message: str
    user_id: int
    token: str


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserResponse
