"""
HTTP middleware.
"""

from roamlist.api.middleware.request_id import RequestIdMiddleware

__all__ = ["RequestIdMiddleware"]
