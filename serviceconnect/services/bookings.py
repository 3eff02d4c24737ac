"""
Booking creation and status management.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Optional

from ..domain.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NotAuthorizedError,
)
from ..domain.models import (
    Booking,
    BookingStatus,
    TimeOfDay,
    parse_date,
    weekday_index,
)
from .availability import AvailabilityService
from .repository import MarketplaceRepositoryProtocol

logger = logging.getLogger(__name__)


class BookingService:
    """
    Creates bookings and moves them through their lifecycle.
    
    Slot availability is checked again at write time: the list a customer
    picked from may be stale by the time the booking arrives.
    """
    
    def __init__(
        self,
        repository: MarketplaceRepositoryProtocol,
        availability_service: AvailabilityService,
    ) -> None:
        self._repository = repository
        self._availability = availability_service
    
    def create_booking(
        self,
        *,
        service_id: str,
        customer_id: str,
        raw_date: Any,
        start_time: Any,
    ) -> Booking:
        """
        Reserve a start time for a customer.
        
        Args:
            service_id: Service being booked
            customer_id: Customer placing the booking
            raw_date: Date as ``YYYY-MM-DD``
            start_time: Start as "HH:MM"
        
        Returns:
            The stored booking, in ``PENDING`` status
        
        Raises:
            InvalidDateError: If the date cannot be parsed
            InvalidInputError: If the start time or customer is malformed
            ServiceNotFoundError: If the service does not exist
            BookingConflictError: If the start time is not bookable
        """
        if not customer_id:
            raise InvalidInputError("customer_id is required")
        
        booking_date = parse_date(raw_date)
        start = TimeOfDay.parse(start_time)
        service = self._availability.get_service(service_id)
        technician = service.technician
        
        if not technician.availability.is_available(weekday_index(booking_date)):
            raise BookingConflictError(
                f"{technician.name or technician.id} is not available on "
                f"{booking_date.strftime('%A')}s"
            )
        
        intervals = self._availability.blocking_intervals_for(service.id, booking_date)
        if not self._availability.slot_calculator.is_slot_available(
            technician.working_hours,
            intervals,
            start,
            service.duration_minutes,
        ):
            logger.warning(
                "Rejected booking of service %s on %s at %s: slot not available",
                service.id,
                booking_date,
                start,
            )
            raise BookingConflictError(
                f"{start} on {booking_date.isoformat()} is not available for {service.name or service.id}"
            )
        
        booking = Booking(
            id="",
            service_id=service.id,
            technician_id=technician.id,
            customer_id=str(customer_id),
            date=booking_date,
            start_time=start,
            end_time=start.add_minutes(service.duration_minutes),
            status=BookingStatus.PENDING,
            amount=service.price,
        )
        stored = self._repository.add_booking(booking)
        logger.info(
            "Created booking %s for service %s on %s %s-%s",
            stored.id,
            service.id,
            booking_date,
            stored.start_time,
            stored.end_time,
        )
        return stored
    
    def update_status(
        self,
        *,
        booking_id: str,
        technician_id: str,
        new_status: Any,
    ) -> Booking:
        """
        Move a booking to a new status on behalf of its technician.
        
        Raises:
            BookingNotFoundError: If the booking does not exist
            NotAuthorizedError: If the booking belongs to another technician
            InvalidStatusTransitionError: If the lifecycle forbids the change
        """
        status = BookingStatus.parse(new_status)
        booking = self._repository.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking not found: {booking_id}")
        
        if booking.technician_id != str(technician_id):
            raise NotAuthorizedError("Not authorized to update this booking")
        
        if not booking.status.can_transition_to(status):
            raise InvalidStatusTransitionError(
                f"Cannot change booking {booking.id} from {booking.status.value} to {status.value}"
            )
        
        stored = self._repository.save_booking(replace(booking, status=status))
        logger.info("Booking %s: %s -> %s", booking.id, booking.status.value, status.value)
        return stored
    
    def list_bookings(
        self,
        *,
        technician_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        status: Optional[Any] = None,
    ) -> List[Booking]:
        """List bookings, newest date first."""
        status_filter = BookingStatus.parse(status) if status is not None else None
        bookings = self._repository.list_bookings(
            technician_id=technician_id,
            customer_id=customer_id,
            status=status_filter,
        )
        return sorted(
            bookings,
            key=lambda booking: (booking.date, booking.start_time),
            reverse=True,
        )
