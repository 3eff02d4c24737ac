"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityResult, AvailabilityService
from .bookings import BookingService
from .catalog import search_services
from .repository import MarketplaceRepositoryProtocol
from .schedule import ScheduleService, TechnicianSchedule

__all__ = [
    "AvailabilityResult",
    "AvailabilityService",
    "BookingService",
    "MarketplaceRepositoryProtocol",
    "ScheduleService",
    "TechnicianSchedule",
    "search_services",
]
