"""
Itinerary Engine - ranked stops per trip and day.
"""

from roamlist.engines.itinerary.itinerary_service import ItineraryService

__all__ = [
    "ItineraryService",
]
