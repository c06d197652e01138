"""FastAPI authentication dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from swadrive.auth.access import AuthError, Identity, authenticate, authorize, required_role

_bearer = HTTPBearer(auto_error=False)


async def require_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> Identity:
    """
    Authenticate the bearer token and authorize it for the matched route.

    The required role comes from ROUTE_ROLES. Raises 401/403 on failure.
    """
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    try:
        identity = authenticate(credentials.credentials if credentials else None)
        authorize(identity, required_role(request.method, path))
    except AuthError as e:
        headers = {"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None
        raise HTTPException(status_code=e.status_code, detail=str(e), headers=headers) from e
    return identity
