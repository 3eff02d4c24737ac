"""
Technician schedule: bookings over a date range and the weekly settings
the slot calculator reads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from ..domain.exceptions import InvalidInputError, TechnicianNotFoundError
from ..domain.models import (
    Booking,
    Technician,
    WeeklyAvailability,
    WorkingHours,
    parse_date,
)
from .repository import MarketplaceRepositoryProtocol

logger = logging.getLogger(__name__)


@dataclass
class TechnicianSchedule:
    """A technician's weekly settings plus their bookings in a date range."""
    technician: Technician
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    bookings: List[Booking] = field(default_factory=list)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "technicianId": self.technician.id,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "availability": self.technician.availability.to_dict(),
            "workingHours": self.technician.working_hours.to_dict(),
            "bookings": [booking.to_dict() for booking in self.bookings],
        }


class ScheduleService:
    """Reads and edits a technician's schedule."""
    
    def __init__(self, repository: MarketplaceRepositoryProtocol) -> None:
        self._repository = repository
    
    def get_technician(self, technician_id: str) -> Technician:
        """Fetch a technician or raise ``TechnicianNotFoundError``."""
        technician = self._repository.get_technician(technician_id)
        if technician is None:
            raise TechnicianNotFoundError(f"Technician not found: {technician_id}")
        return technician
    
    def get_schedule(
        self,
        technician_id: str,
        start: Any = None,
        end: Any = None,
    ) -> TechnicianSchedule:
        """
        Collect a technician's bookings between two dates, oldest first.
        
        Args:
            technician_id: Technician whose schedule is requested
            start: First date (``YYYY-MM-DD``), or None for no lower bound
            end: Last date, inclusive, or None for no upper bound
        
        Raises:
            InvalidDateError: If a bound cannot be parsed
            InvalidInputError: If ``start`` is after ``end``
            TechnicianNotFoundError: If the technician does not exist
        """
        start_date = parse_date(start) if start is not None else None
        end_date = parse_date(end) if end is not None else None
        if start_date and end_date and start_date > end_date:
            raise InvalidInputError(
                f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
            )
        
        technician = self.get_technician(technician_id)
        bookings = self._repository.list_technician_bookings(technician.id, start_date, end_date)
        bookings = sorted(bookings, key=lambda booking: (booking.date, booking.start_time))
        
        logger.debug(
            "Schedule of %s from %s to %s: %d booking(s)",
            technician.id,
            start_date or "-",
            end_date or "-",
            len(bookings),
        )
        return TechnicianSchedule(
            technician=technician,
            start_date=start_date,
            end_date=end_date,
            bookings=bookings,
        )
    
    def update_availability(
        self,
        technician_id: str,
        availability: Optional[Mapping[str, Any]] = None,
        working_hours: Optional[Mapping[str, Any]] = None,
    ) -> Technician:
        """
        Replace a technician's weekly availability and/or working hours.
        
        Args:
            technician_id: Technician to update
            availability: ``{weekday_name: bool}`` for all seven weekdays
            working_hours: ``{"start": "HH:MM", "end": "HH:MM"}``
        
        Returns:
            The stored technician
        
        Raises:
            InvalidInputError: If nothing is given or a value is malformed
            TechnicianNotFoundError: If the technician does not exist
        """
        if availability is None and working_hours is None:
            raise InvalidInputError("Nothing to update: pass availability or working hours")
        
        changes: Dict[str, Any] = {}
        if availability is not None:
            changes["availability"] = WeeklyAvailability.from_mapping(availability)
        if working_hours is not None:
            hours = WorkingHours.from_mapping(working_hours)
            if hours.is_degenerate():
                raise InvalidInputError(f"Working hours must open before they close: {hours}")
            changes["working_hours"] = hours
        
        technician = self.get_technician(technician_id)
        stored = self._repository.save_technician(replace(technician, **changes))
        logger.info(
            "Updated schedule of %s: %s",
            stored.id,
            ", ".join(sorted(changes)),
        )
        return stored
