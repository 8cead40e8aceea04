"""
Role-based permissions.

Roles are account tiers on the principal; each grants a fixed set of
capabilities. Ownership is not a permission: it is enforced by the
AuthorizationGuard.
"""

from enum import Enum
from typing import FrozenSet, Optional, Union

from roamlist.config import get_settings
from roamlist.kernel.models.user import User, UserRole


class Capability(str, Enum):
    """Capabilities a role may grant."""
    BASIC = "basic"
    UNLIMITED_FOLLOWS = "unlimited_follows"
    UNLIMITED_SHARES = "unlimited_shares"
    FULL_FEED = "full_feed"
    CUSTOM_URLS = "custom_urls"
    PRO_BADGE = "pro_badge"
    HIDE_BRANDING = "hide_branding"
    MODERATE = "moderate"
    MANAGE_ROLES = "manage_roles"


_PRO: FrozenSet[Capability] = frozenset({
    Capability.BASIC,
    Capability.UNLIMITED_FOLLOWS,
    Capability.UNLIMITED_SHARES,
    Capability.FULL_FEED,
    Capability.CUSTOM_URLS,
    Capability.PRO_BADGE,
    Capability.HIDE_BRANDING,
})

# Each role includes everything the previous one grants
ROLE_PERMISSIONS: dict[UserRole, FrozenSet[Capability]] = {
    UserRole.FREE: frozenset({Capability.BASIC}),
    UserRole.PRO: _PRO,
    UserRole.MODERATOR: _PRO | {Capability.MODERATE},
    UserRole.ADMIN: _PRO | {Capability.MODERATE, Capability.MANAGE_ROLES},
}


def _normalize_role(role: Union[UserRole, str, None]) -> UserRole:
    if role is None:
        return UserRole.FREE
    try:
        return UserRole(role)
    except ValueError:
        return UserRole.FREE


def permissions_for(role: Union[UserRole, str, None]) -> FrozenSet[Capability]:
    """Capabilities granted to ``role``; unknown roles get the free set."""
    return ROLE_PERMISSIONS[_normalize_role(role)]


def check_permission(role: Union[UserRole, str, None], capability: Capability) -> bool:
    """Check if ``role`` grants ``capability``."""
    return capability in permissions_for(role)


def follow_limit(user: User) -> Optional[int]:
    """
    Maximum number of accounts ``user`` may follow.

    Returns:
        The limit, or None for roles with unlimited follows
    """
    if check_permission(user.role, Capability.UNLIMITED_FOLLOWS):
        return None
    return get_settings().free_follow_limit


def share_limit(user: User) -> Optional[int]:
    """
    Maximum number of trips ``user`` may have shared at once.

    Returns:
        The limit, or None for roles with unlimited shares
    """
    if check_permission(user.role, Capability.UNLIMITED_SHARES):
        return None
    return get_settings().free_share_limit


def feed_history_days(user: User) -> Optional[int]:
    """How far back ``user``'s feed reaches, in days; None for the full history."""
    if check_permission(user.role, Capability.FULL_FEED):
        return None
    return get_settings().free_feed_history_days
