"""
Kernel Layer

Foundations every service builds on:
- Identity Core (principal resolution, ownership checks)
- Ordering Core (ranked collections)
- Visibility Core (tiered sharing over the follow graph)
- Immutable Event Log (all mutations logged)

Invariants:
- All state changes logged before commit; logs immutable
- Principals are passed explicitly, never read from ambient state
"""

from roamlist.kernel.errors import (
    RoamlistError,
    AuthenticationRequired,
    AuthorizationDenied,
    NotFound,
    DuplicateConstraintViolation,
    ValidationError,
)

__all__ = [
    "RoamlistError",
    "AuthenticationRequired",
    "AuthorizationDenied",
    "NotFound",
    "DuplicateConstraintViolation",
    "ValidationError",
]
