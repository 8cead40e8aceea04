"""
FastAPI dependencies for principal resolution and database sessions.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.database import get_session
from roamlist.kernel.identity.guard import AuthorizationGuard
from roamlist.kernel.models.user import User


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_session)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_guard(db: DbSession) -> AuthorizationGuard:
    return AuthorizationGuard(db)


Guard = Annotated[AuthorizationGuard, Depends(get_guard)]


async def get_current_principal(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    guard: Guard,
) -> User:
    """Resolve the bearer token to a principal; AuthenticationRequired (401) otherwise."""
    credential = credentials.credentials if credentials else None
    return await guard.resolve_principal(credential, ip_address=get_client_ip(request))


async def get_optional_principal(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    guard: Guard,
) -> Optional[User]:
    """Resolve the bearer token if one is sent; None for anonymous or bad tokens."""
    credential = credentials.credentials if credentials else None
    return await guard.resolve_principal_optional(credential, ip_address=get_client_ip(request))


CurrentPrincipal = Annotated[User, Depends(get_current_principal)]
OptionalPrincipal = Annotated[Optional[User], Depends(get_optional_principal)]
