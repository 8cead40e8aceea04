"""
Ordering Core - ranked collections.
"""

from roamlist.kernel.ordering.collection_manager import (
    CollectionScope,
    OrderedCollectionManager,
    validate_group_key,
    validate_rank,
)

__all__ = [
    "CollectionScope",
    "OrderedCollectionManager",
    "validate_group_key",
    "validate_rank",
]
