"""
Core business logic for calculating bookable start times.

Pure domain logic: no repository access, no I/O. The caller is responsible
for gating on the technician's weekly availability and for passing only
bookings in a blocking status.
"""

from typing import Iterable, List, Sequence

from .exceptions import InvalidInputError
from .models import BookedInterval, TimeOfDay, WorkingHours

DEFAULT_SLOT_INTERVAL_MINUTES = 30


def _validate_duration(service_duration_minutes: int) -> None:
    if isinstance(service_duration_minutes, bool) or not isinstance(service_duration_minutes, int):
        raise InvalidInputError(
            f"Service duration must be an integer number of minutes, got {service_duration_minutes!r}"
        )
    if service_duration_minutes < 0:
        raise InvalidInputError(
            f"Service duration must not be negative, got {service_duration_minutes}"
        )


class SlotCalculator:
    """
    Calculates the start times at which a service can still be booked.
    
    Algorithm:
    1. Walk candidate starts from opening time in fixed steps
       (``slot_interval_minutes``), while the candidate is before closing
    2. Drop candidates whose service would run past closing time
    3. Drop candidates overlapping an existing booking (half-open test,
       so back-to-back bookings are fine)
    4. Return the survivors in ascending order
    
    The step is a grid policy, independent of the service duration: odd
    durations can leave short gaps that are never offered.
    """
    
    def __init__(self, slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES):
        if isinstance(slot_interval_minutes, bool) or not isinstance(slot_interval_minutes, int):
            raise ValueError(f"slot_interval_minutes must be an integer, got {slot_interval_minutes!r}")
        if slot_interval_minutes <= 0:
            raise ValueError(f"slot_interval_minutes must be positive, got {slot_interval_minutes}")
        self.slot_interval_minutes = slot_interval_minutes
    
    def find_available_slots(
        self,
        working_hours: WorkingHours,
        existing_bookings: Iterable[BookedInterval],
        service_duration_minutes: int,
    ) -> List[str]:
        """
        Compute the bookable start times for one technician on one date.
        
        Args:
            working_hours: The technician's operating window
            existing_bookings: Blocking bookings on the requested date
            service_duration_minutes: Minutes a single booking occupies
        
        Returns:
            Ascending list of "HH:MM" start times; empty when nothing fits
        
        Raises:
            InvalidInputError: If the duration is negative or not an integer
        """
        return [
            slot.format()
            for slot in self.calculate_slot_times(working_hours, existing_bookings, service_duration_minutes)
        ]
    
    def calculate_slot_times(
        self,
        working_hours: WorkingHours,
        existing_bookings: Iterable[BookedInterval],
        service_duration_minutes: int,
    ) -> List[TimeOfDay]:
        """Same as ``find_available_slots`` but returns ``TimeOfDay`` values."""
        _validate_duration(service_duration_minutes)
        
        # Inverted window or zero-length service: nothing to offer
        if working_hours.is_degenerate() or service_duration_minutes == 0:
            return []
        if service_duration_minutes > working_hours.window_minutes():
            return []
        
        bookings = list(existing_bookings)
        opening = working_hours.start.minutes
        closing = working_hours.end.minutes
        
        slots: List[TimeOfDay] = []
        candidate = opening
        while candidate < closing:
            candidate_end = candidate + service_duration_minutes
            if candidate_end > closing:
                # Later candidates only end later
                break
            if not self._overlaps_any(candidate, candidate_end, bookings):
                slots.append(TimeOfDay(candidate))
            candidate += self.slot_interval_minutes
        
        return slots
    
    def is_slot_available(
        self,
        working_hours: WorkingHours,
        existing_bookings: Iterable[BookedInterval],
        start: TimeOfDay,
        service_duration_minutes: int,
    ) -> bool:
        """
        Check whether one specific start time can be booked.
        
        Uses the same closing-time and overlap rules as
        ``find_available_slots`` but does not require ``start`` to lie on
        the step grid.
        """
        _validate_duration(service_duration_minutes)
        
        if working_hours.is_degenerate() or service_duration_minutes == 0:
            return False
        
        start_minutes = start.minutes
        end_minutes = start_minutes + service_duration_minutes
        if start_minutes < working_hours.start.minutes or end_minutes > working_hours.end.minutes:
            return False
        
        return not self._overlaps_any(start_minutes, end_minutes, list(existing_bookings))
    
    @staticmethod
    def _overlaps_any(
        start_minutes: int,
        end_minutes: int,
        bookings: Sequence[BookedInterval],
    ) -> bool:
        return any(booking.overlaps(start_minutes, end_minutes) for booking in bookings)
