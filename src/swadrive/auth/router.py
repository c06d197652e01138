"""Authentication router: /api/register and /api/login."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.auth.jwt import create_access_token
from swadrive.auth.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from swadrive.auth.service import (
    DuplicateEmailError,
    InvalidCredentialsError,
    authenticate_user,
    register_user,
)
from swadrive.database import get_session
from swadrive.db.models import User

router = APIRouter(prefix="/api", tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        user_id=user.id,
        full_name=user.full_name,
        email=user.email,
        phone=user.phone,
        role=user.role,
        created_at=user.created_at,
    )


@router.post("/register", response_model=RegisterResponse)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> RegisterResponse:
    """Register a customer or helper account and return a session token."""
    try:
        user = await register_user(
            db,
            full_name=body.full_name,
            email=body.email,
            phone=body.phone,
            password=body.password,
            role=body.role,
        )
    except DuplicateEmailError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()

    return RegisterResponse(
        message="User registered",
        user_id=user.id,
        token=create_access_token(user.id, user.role),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> LoginResponse:
    """Login with email + password."""
    try:
        user = await authenticate_user(db, body.email, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()

    return LoginResponse(
        message="Login successful",
        token=create_access_token(user.id, user.role),
        user=_user_response(user),
    )
