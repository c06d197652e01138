"""
Access guard: stateless token authentication plus role authorization.

Which role may call which route is declared once, in ROUTE_ROLES, keyed by
(HTTP method, route path template). ``None`` means any authenticated role.
Guarded routes that are missing from the table are denied.
"""

from __future__ import annotations

from dataclasses import dataclass

import jwt

from swadrive.auth.jwt import verify_token
from swadrive.db.enums import Role

ANY_ROLE = None

ROUTE_ROLES: dict[tuple[str, str], Role | None] = {
    # Customer: task ownership
    ("POST", "/api/tasks"): Role.CUSTOMER,
    ("GET", "/api/tasks/{task_id}"): Role.CUSTOMER,
    ("PUT", "/api/tasks/{task_id}"): Role.CUSTOMER,
    ("DELETE", "/api/tasks/{task_id}"): Role.CUSTOMER,
    ("GET", "/api/my-tasks"): Role.CUSTOMER,
    ("GET", "/api/my-completed-tasks"): Role.CUSTOMER,
    ("POST", "/api/tasks/{task_id}/review"): Role.CUSTOMER,
    # Helper: discovery and assignment
    ("GET", "/api/open-tasks"): Role.HELPER,
    ("GET", "/api/helper/tasks/{task_id}"): Role.HELPER,
    ("POST", "/api/tasks/{task_id}/accept"): Role.HELPER,
    ("GET", "/api/my-assigned-tasks"): Role.HELPER,
    ("POST", "/api/tasks/{task_id}/complete"): Role.HELPER,
    # Notifications
    ("GET", "/api/notifications"): Role.CUSTOMER,
    ("PUT", "/api/notifications/{notification_id}/read"): Role.CUSTOMER,
    # Chat (participant checks happen in the chat service)
    ("POST", "/api/chats/start"): ANY_ROLE,
    ("GET", "/api/chats"): ANY_ROLE,
    ("GET", "/api/chats/{chat_id}/messages"): ANY_ROLE,
    ("POST", "/api/chats/{chat_id}/messages"): ANY_ROLE,
}


class AuthError(Exception):
    """Base class for access guard failures."""

    status_code = 401


class UnauthenticatedError(AuthError):
    """No bearer token was presented."""


class InvalidTokenError(AuthError):
    """The token failed signature, expiry or shape checks."""


class ForbiddenError(AuthError):
    """The caller's role may not use this route."""

    status_code = 403


@dataclass(frozen=True)
class Identity:
    """Who is calling, as read from the token."""

    user_id: int
    role: Role


def authenticate(token: str | None) -> Identity:
    """Decode a bearer token into an Identity. No database lookup."""
    if not token:
        raise UnauthenticatedError("No token provided")
    try:
        payload = verify_token(token, expected_type="access")
        return Identity(user_id=int(payload["sub"]), role=Role(payload["role"]))
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise InvalidTokenError("Invalid token") from e


def required_role(method: str, path: str) -> Role | None:
    """Look up the role a route requires. Raises ForbiddenError for unknown routes."""
    try:
        return ROUTE_ROLES[(method.upper(), path)]
    except KeyError:
        raise ForbiddenError("Access denied: route not permitted") from None


def authorize(identity: Identity, role: Role | None) -> None:
    """Raise ForbiddenError unless the identity holds the required role."""
    if role is not None and identity.role is not role:
        raise ForbiddenError("Access denied: wrong role")
