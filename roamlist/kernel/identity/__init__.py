"""
Identity Core - credential resolution and ownership enforcement.
"""

from roamlist.kernel.identity.tokens import (
    IdentityClaims,
    IdentityTokenManager,
    get_token_manager,
)
from roamlist.kernel.identity.guard import AuthorizationGuard

__all__ = [
    "IdentityClaims",
    "IdentityTokenManager",
    "get_token_manager",
    "AuthorizationGuard",
]
