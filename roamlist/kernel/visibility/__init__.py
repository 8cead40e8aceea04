"""
Visibility Core - tiered sharing over the follow graph.
"""

from roamlist.kernel.visibility.policy_engine import (
    ContributorProfile,
    ShareableResource,
    VisibilityPolicyEngine,
    VisibilityStats,
    aggregate_stats,
    canonical_order,
    distinct_public_owners,
    filter_visible,
    is_visible,
)

__all__ = [
    "ContributorProfile",
    "ShareableResource",
    "VisibilityPolicyEngine",
    "VisibilityStats",
    "aggregate_stats",
    "canonical_order",
    "distinct_public_owners",
    "filter_visible",
    "is_visible",
]
