"""
Append-only event log access.
"""

from roamlist.kernel.events.event_store import EventStore

__all__ = ["EventStore"]
