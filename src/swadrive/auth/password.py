"""
Password hashing using argon2id.

Plaintext passwords are never stored; only the encoded argon2 hash is. The
cost parameters come from Settings, and a stored hash made with other
parameters reports that it needs a rehash, which login then performs.
"""

from __future__ import annotations

from functools import lru_cache

import argon2

from swadrive.config import get_settings


@lru_cache(maxsize=4)
def _hasher_for(time_cost: int, memory_cost: int) -> argon2.PasswordHasher:
    return argon2.PasswordHasher(
        time_cost=time_cost,
        memory_cost=memory_cost,
        parallelism=1,
        hash_len=32,
        salt_len=16,
        type=argon2.Type.ID,
    )


def _hasher() -> argon2.PasswordHasher:
    settings = get_settings()
    return _hasher_for(settings.password_hash_time_cost, settings.password_hash_memory_cost)


def hash_password(password: str) -> str:
    """Hash a password with the configured argon2id parameters."""
    return _hasher().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True if the password matches the stored hash. Never raises on mismatch."""
    try:
        return _hasher().verify(password_hash, password)
    except (argon2.exceptions.VerificationError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """True if the hash was made with parameters other than the configured ones."""
    return _hasher().check_needs_rehash(password_hash)
