"""
Credential store: registration and password login.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from swadrive.auth.password import check_needs_rehash, hash_password, verify_password
from swadrive.db.enums import Role
from swadrive.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class DuplicateEmailError(ValueError):
    """Raised when registering an email that already has an account."""


class InvalidCredentialsError(ValueError):
    """Raised when an email/password pair does not authenticate."""


class UserNotFoundError(InvalidCredentialsError):
    """No account exists for the email."""


class WrongPasswordError(InvalidCredentialsError):
    """The account exists but the password does not match."""


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    full_name: str | None,
    email: str,
    phone: str | None,
    password: str,
    role: Role = Role.CUSTOMER,
) -> User:
    """
    Register a new user. The password is hashed before it is stored.

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    existing = await get_user_by_email(db, email)
    if existing is not None:
        msg = "Email already exists"
        raise DuplicateEmailError(msg)

    user = User(
        full_name=full_name,
        email=email.lower().strip(),
        phone=phone,
        password_hash=hash_password(password),
        role=role,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        msg = "Email already exists"
        raise DuplicateEmailError(msg) from e
    logger.info("user_registered", user_id=user.id, role=user.role.value)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Raises:
        UserNotFoundError: If no account has this email.
        WrongPasswordError: If the password does not match the stored hash.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        logger.info("login_failed", reason="user_not_found")
        msg = "User not found"
        raise UserNotFoundError(msg)

    if not verify_password(password, user.password_hash):
        logger.info("login_failed", reason="wrong_password", user_id=user.id)
        msg = "Wrong password"
        raise WrongPasswordError(msg)

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)

    return user
