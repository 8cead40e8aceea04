"""
Permission Core - role capabilities.
"""

from roamlist.kernel.permissions.permission_service import (
    Capability,
    ROLE_PERMISSIONS,
    check_permission,
    feed_history_days,
    follow_limit,
    permissions_for,
    share_limit,
)

__all__ = [
    "Capability",
    "ROLE_PERMISSIONS",
    "check_permission",
    "feed_history_days",
    "follow_limit",
    "permissions_for",
    "share_limit",
]
