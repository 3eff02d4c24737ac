"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    BLOCKING_STATUSES,
    BookedInterval,
    Booking,
    BookingStatus,
    Service,
    Technician,
    TimeOfDay,
    WeeklyAvailability,
    WorkingHours,
)
from .slot_calculator import SlotCalculator

__all__ = [
    "BLOCKING_STATUSES",
    "BookedInterval",
    "Booking",
    "BookingStatus",
    "Service",
    "Technician",
    "TimeOfDay",
    "WeeklyAvailability",
    "WorkingHours",
    "SlotCalculator",
]
