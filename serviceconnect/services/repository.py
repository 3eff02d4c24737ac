"""
Storage protocol the application services depend on.

Both the JSON file store and the remote REST client satisfy it, and tests
plug in simple in-memory stubs.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol

from ..domain.models import Booking, BookingStatus, Service, Technician


class MarketplaceRepositoryProtocol(Protocol):
    """Protocol describing the data access needed by the services."""
    
    def get_technician(self, technician_id: str) -> Optional[Technician]:
        """Return one technician, or None if unknown."""
    
    def save_technician(self, technician: Technician) -> Technician:
        """Persist a technician's schedule settings."""
    
    def get_service(self, service_id: str) -> Optional[Service]:
        """Return the service with its technician, or None if unknown."""
    
    def list_services(self) -> List[Service]:
        """Return all services."""
    
    def list_bookings_for_date(self, service_id: str, booking_date: date) -> List[Booking]:
        """Return every booking of a service on one date, whatever its status."""
    
    def list_bookings(
        self,
        *,
        technician_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> List[Booking]:
        """Return bookings matching all given filters."""
    
    def list_technician_bookings(
        self,
        technician_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Booking]:
        """Return a technician's bookings dated within ``start_date``..``end_date`` (inclusive)."""
    
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        """Return one booking, or None if unknown."""
    
    def add_booking(self, booking: Booking) -> Booking:
        """Persist a new booking and return the stored version."""
    
    def save_booking(self, booking: Booking) -> Booking:
        """Persist changes to an existing booking."""
