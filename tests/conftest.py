"""
Shared fixtures: an in-memory repository and a small marketplace.
"""

from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional

import pytest

from serviceconnect.domain.models import (
    Booking,
    BookingStatus,
    Service,
    Technician,
    TimeOfDay,
    WeeklyAvailability,
    WorkingHours,
)


class StubRepository:
    """Minimal in-memory implementation of MarketplaceRepositoryProtocol."""
    
    def __init__(self, services: List[Service], bookings: Optional[List[Booking]] = None):
        self.services: Dict[str, Service] = {s.id: s for s in services}
        self.bookings: Dict[str, Booking] = {b.id: b for b in bookings or []}
        self.technicians: Dict[str, Technician] = {s.technician.id: s.technician for s in services}
        self.date_queries: List[tuple] = []
        self._next_id = 1
    
    def get_technician(self, technician_id):
        return self.technicians.get(technician_id)
    
    def save_technician(self, technician):
        self.technicians[technician.id] = technician
        return technician
    
    def list_technician_bookings(self, technician_id, start_date=None, end_date=None):
        return [
            b for b in self.bookings.values()
            if b.technician_id == technician_id
            and (start_date is None or b.date >= start_date)
            and (end_date is None or b.date <= end_date)
        ]
    
    def get_service(self, service_id):
        return self.services.get(service_id)
    
    def list_services(self):
        return list(self.services.values())
    
    def list_bookings_for_date(self, service_id, booking_date):
        self.date_queries.append((service_id, booking_date))
        return [
            b for b in self.bookings.values()
            if b.service_id == service_id and b.date == booking_date
        ]
    
    def list_bookings(self, *, technician_id=None, customer_id=None, status=None):
        result = list(self.bookings.values())
        if technician_id is not None:
            result = [b for b in result if b.technician_id == technician_id]
        if customer_id is not None:
            result = [b for b in result if b.customer_id == customer_id]
        if status is not None:
            result = [b for b in result if b.status == status]
        return result
    
    def get_booking(self, booking_id):
        return self.bookings.get(booking_id)
    
    def add_booking(self, booking):
        stored = replace(booking, id=f"new-{self._next_id}")
        self._next_id += 1
        self.bookings[stored.id] = stored
        return stored
    
    def save_booking(self, booking):
        self.bookings[booking.id] = booking
        return booking


def make_technician(
    technician_id: str = "tech-1",
    start: str = "09:00",
    end: str = "17:00",
    closed: tuple = ("sunday",),
) -> Technician:
    availability = WeeklyAvailability.from_mapping(
        {
            name: name not in closed
            for name in ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
        }
    )
    return Technician(
        id=technician_id,
        name="John Kamau",
        availability=availability,
        working_hours=WorkingHours.from_mapping({"start": start, "end": end}),
    )


def make_booking(
    booking_id: str,
    start: str,
    end: str,
    status: BookingStatus = BookingStatus.CONFIRMED,
    service_id: str = "svc-1",
    booking_date: date = date(2024, 11, 25),
    technician_id: str = "tech-1",
    customer_id: str = "cust-1",
) -> Booking:
    return Booking(
        id=booking_id,
        service_id=service_id,
        technician_id=technician_id,
        customer_id=customer_id,
        date=booking_date,
        start_time=TimeOfDay.parse(start),
        end_time=TimeOfDay.parse(end),
        status=status,
        amount=1500.0,
    )


@pytest.fixture
def technician() -> Technician:
    return make_technician()


@pytest.fixture
def service(technician: Technician) -> Service:
    return Service(
        id="svc-1",
        name="Emergency Plumbing Repair",
        duration_minutes=60,
        price=1500.0,
        technician=technician,
    )


@pytest.fixture
def repository(service: Service) -> StubRepository:
    return StubRepository(services=[service])
