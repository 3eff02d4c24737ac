"""
Tests for the AvailabilityService orchestration layer.
"""

from datetime import date

import pytest

from conftest import StubRepository, make_booking, make_technician
from serviceconnect.domain.exceptions import InvalidDateError, ServiceNotFoundError
from serviceconnect.domain.models import BookingStatus, Service
from serviceconnect.domain.slot_calculator import SlotCalculator
from serviceconnect.services.availability import AvailabilityService, blocking_intervals

MONDAY = "2024-11-25"
SUNDAY = "2024-11-24"


def test_slots_for_a_free_day(repository):
    """A working day without bookings yields the full grid."""
    service = AvailabilityService(repository=repository)
    
    result = service.get_time_slots("svc-1", MONDAY)
    
    assert result.technician_available
    assert result.date == date(2024, 11, 25)
    assert result.time_slots[0] == "09:00"
    assert result.time_slots[-1] == "16:00"
    assert len(result.time_slots) == 15


def test_closed_day_short_circuits(repository):
    """On a day off no bookings are fetched and no slots are returned."""
    service = AvailabilityService(repository=repository)
    
    result = service.get_time_slots("svc-1", SUNDAY)
    
    assert not result.technician_available
    assert result.time_slots == []
    assert repository.date_queries == []


def test_blocking_bookings_remove_slots(service):
    """Pending and confirmed bookings block; cancelled and rejected ones don't."""
    repository = StubRepository(
        services=[service],
        bookings=[
            make_booking("b1", "10:00", "11:00", BookingStatus.CONFIRMED),
            make_booking("b2", "12:00", "13:00", BookingStatus.PENDING),
            make_booking("b3", "14:00", "15:00", BookingStatus.CANCELLED),
            make_booking("b4", "15:00", "16:00", BookingStatus.REJECTED),
        ],
    )
    availability = AvailabilityService(repository=repository)
    
    slots = availability.get_time_slots("svc-1", MONDAY).time_slots
    
    assert "10:00" not in slots
    assert "12:00" not in slots
    assert "11:00" in slots
    assert "14:00" in slots
    assert "15:00" in slots
    assert repository.date_queries == [("svc-1", date(2024, 11, 25))]


def test_bookings_on_other_dates_are_ignored(service):
    repository = StubRepository(
        services=[service],
        bookings=[make_booking("b1", "09:00", "17:00", booking_date=date(2024, 11, 26))],
    )
    
    result = AvailabilityService(repository=repository).get_time_slots("svc-1", MONDAY)
    
    assert len(result.time_slots) == 15


def test_unknown_service_raises(repository):
    service = AvailabilityService(repository=repository)
    
    with pytest.raises(ServiceNotFoundError) as excinfo:
        service.get_time_slots("missing", MONDAY)
    
    assert excinfo.value.http_status == 404


@pytest.mark.parametrize("raw", [None, "", "not-a-date"])
def test_invalid_date_raises(repository, raw):
    service = AvailabilityService(repository=repository)
    
    with pytest.raises(InvalidDateError) as excinfo:
        service.get_time_slots("svc-1", raw)
    
    assert excinfo.value.http_status == 400


def test_misconfigured_hours_give_no_slots():
    """An inverted working window behaves like a closed day, not an error."""
    technician = make_technician(start="17:00", end="09:00")
    service = Service(id="svc-1", name="Wiring", duration_minutes=60, price=800.0, technician=technician)
    availability = AvailabilityService(repository=StubRepository(services=[service]))
    
    result = availability.get_time_slots("svc-1", MONDAY)
    
    assert result.technician_available
    assert result.time_slots == []


def test_custom_grid_and_blocking_statuses(service):
    """The grid step and the blocking set come from the caller."""
    repository = StubRepository(
        services=[service],
        bookings=[make_booking("b1", "09:00", "10:00", BookingStatus.PENDING)],
    )
    availability = AvailabilityService(
        repository=repository,
        slot_calculator=SlotCalculator(slot_interval_minutes=60),
        blocking_statuses=frozenset({BookingStatus.CONFIRMED}),
    )
    
    slots = availability.get_time_slots("svc-1", MONDAY).time_slots
    
    assert slots[0] == "09:00"
    assert slots == ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"]


def test_to_dict(repository):
    result = AvailabilityService(repository=repository).get_time_slots("svc-1", MONDAY)
    
    payload = result.to_dict()
    
    assert payload["serviceId"] == "svc-1"
    assert payload["date"] == MONDAY
    assert payload["technicianAvailable"] is True
    assert payload["timeSlots"] == result.time_slots


def test_blocking_intervals_filters_statuses():
    bookings = [
        make_booking("b1", "09:00", "10:00", BookingStatus.PENDING),
        make_booking("b2", "10:00", "11:00", BookingStatus.COMPLETED),
    ]
    
    intervals = blocking_intervals(bookings)
    
    assert [str(interval) for interval in intervals] == ["09:00 - 10:00"]
