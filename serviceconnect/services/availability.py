"""
Application service answering "when can this service be booked on this date?".

It resolves the raw request (date string, service id) against the
repository, gates on the technician's weekly schedule, narrows bookings to
the blocking statuses and delegates the slot arithmetic to the domain-level
``SlotCalculator``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from ..domain.exceptions import ServiceNotFoundError
from ..domain.models import (
    BLOCKING_STATUSES,
    BookedInterval,
    Booking,
    BookingStatus,
    Service,
    parse_date,
    weekday_index,
)
from ..domain.slot_calculator import SlotCalculator
from .repository import MarketplaceRepositoryProtocol

logger = logging.getLogger(__name__)


def blocking_intervals(
    bookings: Iterable[Booking],
    blocking_statuses: FrozenSet[BookingStatus] = BLOCKING_STATUSES,
) -> List[BookedInterval]:
    """Keep only bookings that occupy their time range and return their intervals."""
    return [
        booking.interval()
        for booking in bookings
        if booking.is_blocking(blocking_statuses)
    ]


@dataclass
class AvailabilityResult:
    """Slots offered for one service on one date."""
    service_id: str
    date: date
    technician_available: bool
    time_slots: List[str] = field(default_factory=list)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "serviceId": self.service_id,
            "date": self.date.isoformat(),
            "technicianAvailable": self.technician_available,
            "timeSlots": list(self.time_slots),
        }


class AvailabilityService:
    """
    Orchestrates data lookup and slot calculation for availability queries.
    """
    
    def __init__(
        self,
        repository: MarketplaceRepositoryProtocol,
        slot_calculator: Optional[SlotCalculator] = None,
        blocking_statuses: FrozenSet[BookingStatus] = BLOCKING_STATUSES,
    ) -> None:
        self._repository = repository
        self._slot_calculator = slot_calculator or SlotCalculator()
        self._blocking_statuses = frozenset(blocking_statuses)
    
    @property
    def slot_calculator(self) -> SlotCalculator:
        return self._slot_calculator
    
    def get_time_slots(self, service_id: str, raw_date: Any) -> AvailabilityResult:
        """
        Compute the available start times for a service on a date.
        
        Args:
            service_id: Id of the service being booked
            raw_date: Requested date as ``YYYY-MM-DD``
        
        Returns:
            AvailabilityResult; ``time_slots`` is empty when nothing is free
        
        Raises:
            InvalidDateError: If the date is missing or unparseable
            ServiceNotFoundError: If the service does not exist
        """
        requested_date = parse_date(raw_date)
        service = self.get_service(service_id)
        
        technician = service.technician
        if not technician.availability.is_available(weekday_index(requested_date)):
            logger.debug(
                "Technician %s does not work on %s", technician.id, requested_date.strftime("%A")
            )
            return AvailabilityResult(
                service_id=service.id,
                date=requested_date,
                technician_available=False,
            )
        
        intervals = self.blocking_intervals_for(service.id, requested_date)
        slots = self._slot_calculator.find_available_slots(
            working_hours=technician.working_hours,
            existing_bookings=intervals,
            service_duration_minutes=service.duration_minutes,
        )
        
        logger.debug(
            "Service %s on %s: %d blocking booking(s), %d slot(s) within %s",
            service.id,
            requested_date,
            len(intervals),
            len(slots),
            technician.working_hours,
        )
        
        return AvailabilityResult(
            service_id=service.id,
            date=requested_date,
            technician_available=True,
            time_slots=slots,
        )
    
    def get_service(self, service_id: str) -> Service:
        """Fetch a service or raise ``ServiceNotFoundError``."""
        service = self._repository.get_service(service_id)
        if service is None:
            raise ServiceNotFoundError(f"Service not found: {service_id}")
        return service
    
    def blocking_intervals_for(self, service_id: str, booking_date: date) -> List[BookedInterval]:
        """
        Return the intervals of the blocking bookings of a service on a date.
        
        The status filter is applied here even if the repository already
        filtered, so cancelled or rejected bookings never hide a slot.
        """
        bookings = self._repository.list_bookings_for_date(service_id, booking_date)
        return blocking_intervals(bookings, self._blocking_statuses)
