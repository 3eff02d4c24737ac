"""
Tests for the technician schedule service and service search.
"""

from datetime import date

import pytest

from conftest import StubRepository, make_booking
from serviceconnect.domain.exceptions import (
    InvalidDateError,
    InvalidInputError,
    TechnicianNotFoundError,
)
from serviceconnect.domain.models import BookingStatus, TimeOfDay
from serviceconnect.services.catalog import search_services
from serviceconnect.services.schedule import ScheduleService

WEEKDAYS_ONLY = {
    "sunday": False,
    "monday": True,
    "tuesday": True,
    "wednesday": True,
    "thursday": True,
    "friday": True,
    "saturday": False,
}


@pytest.fixture
def busy_repository(service):
    return StubRepository(
        services=[service],
        bookings=[
            make_booking("late", "14:00", "15:00", booking_date=date(2024, 11, 27)),
            make_booking("early", "09:00", "10:00", booking_date=date(2024, 11, 27)),
            make_booking("first", "11:00", "12:00", BookingStatus.PENDING, booking_date=date(2024, 11, 25)),
            make_booking("outside", "09:00", "10:00", booking_date=date(2024, 12, 5)),
            make_booking("other", "09:00", "10:00", technician_id="tech-2", booking_date=date(2024, 11, 26)),
        ],
    )


class TestGetSchedule:
    """Tests for ScheduleService.get_schedule."""
    
    def test_range_is_inclusive_and_ordered(self, busy_repository):
        schedule = ScheduleService(busy_repository).get_schedule("tech-1", "2024-11-25", "2024-11-27")
        
        assert [b.id for b in schedule.bookings] == ["first", "early", "late"]
        assert schedule.start_date == date(2024, 11, 25)
        assert schedule.end_date == date(2024, 11, 27)
    
    def test_without_bounds_returns_everything(self, busy_repository):
        schedule = ScheduleService(busy_repository).get_schedule("tech-1")
        
        assert [b.id for b in schedule.bookings] == ["first", "early", "late", "outside"]
    
    def test_to_dict_carries_settings(self, busy_repository):
        payload = ScheduleService(busy_repository).get_schedule("tech-1", "2024-12-01", "2024-12-31").to_dict()
        
        assert payload["technicianId"] == "tech-1"
        assert payload["availability"]["sunday"] is False
        assert payload["workingHours"] == {"start": "09:00", "end": "17:00"}
        assert [b["id"] for b in payload["bookings"]] == ["outside"]
    
    def test_unknown_technician(self, busy_repository):
        with pytest.raises(TechnicianNotFoundError):
            ScheduleService(busy_repository).get_schedule("ghost")
    
    def test_inverted_range(self, busy_repository):
        with pytest.raises(InvalidInputError, match="after end date"):
            ScheduleService(busy_repository).get_schedule("tech-1", "2024-11-30", "2024-11-01")
    
    def test_bad_date(self, busy_repository):
        with pytest.raises(InvalidDateError):
            ScheduleService(busy_repository).get_schedule("tech-1", "30.11.2024")


class TestUpdateAvailability:
    """Tests for ScheduleService.update_availability."""
    
    def test_replaces_weekdays(self, repository):
        updated = ScheduleService(repository).update_availability("tech-1", availability=WEEKDAYS_ONLY)
        
        assert updated.availability.saturday is False
        assert updated.availability.monday is True
        assert updated.working_hours.start == TimeOfDay.parse("09:00")
        assert repository.get_technician("tech-1") == updated
    
    def test_replaces_hours(self, repository):
        updated = ScheduleService(repository).update_availability(
            "tech-1", working_hours={"start": "07:30", "end": "12:00"}
        )
        
        assert str(updated.working_hours) == "07:30 - 12:00"
        assert updated.availability.saturday is True
    
    def test_requires_a_change(self, repository):
        with pytest.raises(InvalidInputError, match="Nothing to update"):
            ScheduleService(repository).update_availability("tech-1")
    
    @pytest.mark.parametrize(
        "availability",
        [
            {"monday": True},
            dict(WEEKDAYS_ONLY, monday="yes"),
            dict(WEEKDAYS_ONLY, funday=True),
        ],
    )
    def test_rejects_malformed_availability(self, repository, availability):
        with pytest.raises(InvalidInputError):
            ScheduleService(repository).update_availability("tech-1", availability=availability)
        
        assert repository.get_technician("tech-1").availability.saturday is True
    
    @pytest.mark.parametrize(
        "hours",
        [
            {"start": "17:00", "end": "09:00"},
            {"start": "9am", "end": "17:00"},
            {"start": "09:00"},
        ],
    )
    def test_rejects_malformed_hours(self, repository, hours):
        with pytest.raises(InvalidInputError):
            ScheduleService(repository).update_availability("tech-1", working_hours=hours)
    
    def test_unknown_technician(self, repository):
        with pytest.raises(TechnicianNotFoundError):
            ScheduleService(repository).update_availability("ghost", availability=WEEKDAYS_ONLY)


class TestSearchServices:
    """Tests for search_services."""
    
    def test_matches_name_description_and_technician(self, service):
        service.description = "Leaks and burst pipes"
        
        assert search_services([service], query="plumbing") == [service]
        assert search_services([service], query="BURST") == [service]
        assert search_services([service], query="kamau") == [service]
        assert search_services([service], query="roofing") == []
    
    def test_category_filter(self, service):
        service.category = "PLUMBING"
        
        assert search_services([service], category="plumbing") == [service]
        assert search_services([service], category="all") == [service]
        assert search_services([service], category="ELECTRICAL") == []
    
    def test_no_filters_returns_all(self, service):
        assert search_services([service]) == [service]
