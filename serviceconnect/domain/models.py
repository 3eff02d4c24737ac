"""
Domain models for technician schedules, bookings and time-of-day arithmetic.

Times of day travel as "HH:MM" strings at the edges of the system and as
minutes since midnight everywhere else.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Tuple

import pendulum

from .exceptions import InvalidDateError, InvalidInputError

MINUTES_PER_DAY = 24 * 60

# Sunday-first, matching the weekday index used by the booking UI
WEEKDAY_NAMES: Tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def weekday_index(day: date) -> int:
    """Return the weekday of ``day`` as an index with Sunday=0 ... Saturday=6."""
    return day.isoweekday() % 7


def parse_date(value: Any) -> date:
    """
    Parse a calendar date given as ``YYYY-MM-DD``.
    
    Args:
        value: Raw date string (or an already resolved date)
    
    Returns:
        The resolved date
    
    Raises:
        InvalidDateError: If the value is missing or unparseable
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise InvalidDateError("Date parameter is required")
    
    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except (ValueError, TypeError) as exc:
        raise InvalidDateError(
            f"Invalid date: '{value}'. Use the YYYY-MM-DD format."
        ) from exc


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    A wall-clock time as minutes since midnight.
    
    ``24:00`` is allowed so a window can close at the end of the day.
    """
    minutes: int
    
    def __post_init__(self):
        if isinstance(self.minutes, bool) or not isinstance(self.minutes, int):
            raise InvalidInputError(f"Minutes must be an integer, got {self.minutes!r}")
        if not 0 <= self.minutes <= MINUTES_PER_DAY:
            raise InvalidInputError(
                f"Time of day out of range: {self.minutes} minutes after midnight"
            )
    
    @classmethod
    def parse(cls, value: Any) -> "TimeOfDay":
        """
        Parse an "HH:MM" 24-hour string.
        
        Raises:
            InvalidInputError: If the string is malformed or out of range
        """
        if isinstance(value, TimeOfDay):
            return value
        if not isinstance(value, str):
            raise InvalidInputError(f"Time must be an 'HH:MM' string, got {value!r}")
        
        match = _TIME_PATTERN.match(value.strip())
        if not match:
            raise InvalidInputError(f"Invalid time '{value}', expected HH:MM")
        
        hour, minute = int(match.group(1)), int(match.group(2))
        if minute > 59 or hour > 24 or (hour == 24 and minute != 0):
            raise InvalidInputError(f"Invalid time '{value}', expected HH:MM")
        
        return cls(hour * 60 + minute)
    
    @property
    def hour(self) -> int:
        return self.minutes // 60
    
    @property
    def minute(self) -> int:
        return self.minutes % 60
    
    def add_minutes(self, minutes: int) -> "TimeOfDay":
        """Return a new time shifted by ``minutes``."""
        return TimeOfDay(self.minutes + minutes)
    
    def format(self) -> str:
        """Format as a zero-padded "HH:MM" string."""
        return f"{self.hour:02d}:{self.minute:02d}"
    
    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class WorkingHours:
    """
    A technician's daily operating window.
    
    An inverted window is representable on purpose: misconfigured profiles
    simply produce no slots.
    """
    start: TimeOfDay
    end: TimeOfDay
    
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WorkingHours":
        """Build from the stored ``{"start": "HH:MM", "end": "HH:MM"}`` blob."""
        if not isinstance(data, Mapping) or "start" not in data or "end" not in data:
            raise InvalidInputError(
                f"Working hours need 'start' and 'end' keys, got {data!r}"
            )
        return cls(start=TimeOfDay.parse(data["start"]), end=TimeOfDay.parse(data["end"]))
    
    def is_degenerate(self) -> bool:
        """True when the window opens at or after it closes."""
        return self.start >= self.end
    
    def window_minutes(self) -> int:
        """Length of the window in minutes (0 for a degenerate window)."""
        return max(0, self.end.minutes - self.start.minutes)
    
    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.format(), "end": self.end.format()}
    
    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


@dataclass(frozen=True)
class WeeklyAvailability:
    """Which weekdays a technician is nominally willing to work."""
    sunday: bool
    monday: bool
    tuesday: bool
    wednesday: bool
    thursday: bool
    friday: bool
    saturday: bool
    
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WeeklyAvailability":
        """
        Build from a ``{weekday_name: bool}`` mapping.
        
        Raises:
            InvalidInputError: Unless exactly the seven weekday names are
                present, each with a boolean value
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Weekly availability must be a mapping, got {data!r}")
        
        keys = set(data.keys())
        expected = set(WEEKDAY_NAMES)
        if keys != expected:
            missing = sorted(expected - keys)
            unknown = sorted(str(key) for key in keys - expected)
            raise InvalidInputError(
                f"Weekly availability must list all seven weekdays "
                f"(missing: {missing or '-'}, unknown: {unknown or '-'})"
            )
        
        non_bool = [name for name in WEEKDAY_NAMES if not isinstance(data[name], bool)]
        if non_bool:
            raise InvalidInputError(f"Weekly availability values must be booleans: {non_bool}")
        
        return cls(**{name: data[name] for name in WEEKDAY_NAMES})
    
    @classmethod
    def every_day(cls) -> "WeeklyAvailability":
        return cls(**{name: True for name in WEEKDAY_NAMES})
    
    def is_available(self, weekday: int) -> bool:
        """Check availability for a Sunday=0 weekday index."""
        if not 0 <= weekday <= 6:
            raise InvalidInputError(f"Weekday index must be between 0 and 6, got {weekday}")
        return getattr(self, WEEKDAY_NAMES[weekday])
    
    def is_available_on(self, day: date) -> bool:
        return self.is_available(weekday_index(day))
    
    def to_dict(self) -> Dict[str, bool]:
        return {name: getattr(self, name) for name in WEEKDAY_NAMES}


@dataclass(frozen=True)
class BookedInterval:
    """
    An existing reservation on the target date.
    
    Invariant: start_time must be before end_time.
    """
    start_time: TimeOfDay
    end_time: TimeOfDay
    
    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise InvalidInputError(
                f"Booking start {self.start_time} must be before end {self.end_time}"
            )
    
    @classmethod
    def from_strings(cls, start_time: str, end_time: str) -> "BookedInterval":
        return cls(start_time=TimeOfDay.parse(start_time), end_time=TimeOfDay.parse(end_time))
    
    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """Half-open overlap test against ``[start_minutes, end_minutes)``."""
        return start_minutes < self.end_time.minutes and self.start_time.minutes < end_minutes
    
    def __str__(self) -> str:
        return f"{self.start_time} - {self.end_time}"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    
    @classmethod
    def parse(cls, value: Any) -> "BookingStatus":
        if isinstance(value, BookingStatus):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            allowed = ", ".join(status.value for status in cls)
            raise InvalidInputError(
                f"Unknown booking status '{value}'. Use one of: {allowed}"
            ) from exc
    
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]
    
    def can_transition_to(self, other: "BookingStatus") -> bool:
        return other in ALLOWED_TRANSITIONS[self]


# Statuses that occupy a time range and must not be double-booked
BLOCKING_STATUSES: FrozenSet[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.REJECTED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
}


@dataclass
class Technician:
    """A technician profile with its schedule settings."""
    id: str
    name: str
    availability: WeeklyAvailability
    working_hours: WorkingHours
    phone: str = ""
    
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Technician":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            availability=WeeklyAvailability.from_mapping(data["availability"]),
            working_hours=WorkingHours.from_mapping(data["workingHours"]),
            phone=data.get("phone") or "",
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "availability": self.availability.to_dict(),
            "workingHours": self.working_hours.to_dict(),
        }


@dataclass
class Service:
    """A bookable service offered by one technician."""
    id: str
    name: str
    duration_minutes: int
    price: float
    technician: Technician
    category: str = ""
    description: str = ""
    
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], technician: Technician) -> "Service":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            duration_minutes=data["duration"],
            price=float(data.get("price", 0)),
            technician=technician,
            category=data.get("category") or "",
            description=data.get("description") or "",
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "duration": self.duration_minutes,
            "price": self.price,
            "technicianId": self.technician.id,
        }


@dataclass
class Booking:
    """A reservation of one service slot by a customer."""
    id: str
    service_id: str
    technician_id: str
    customer_id: str
    date: date
    start_time: TimeOfDay
    end_time: TimeOfDay
    status: BookingStatus = BookingStatus.PENDING
    amount: float = 0.0
    
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Booking":
        return cls(
            id=str(data["id"]),
            service_id=str(data["serviceId"]),
            technician_id=str(data.get("technicianId", "")),
            customer_id=str(data.get("customerId", "")),
            date=parse_date(str(data["date"])[:10]),
            start_time=TimeOfDay.parse(data["startTime"]),
            end_time=TimeOfDay.parse(data["endTime"]),
            status=BookingStatus.parse(data.get("status", BookingStatus.PENDING)),
            amount=float(data.get("amount", 0)),
        )
    
    def is_blocking(self, blocking_statuses: FrozenSet[BookingStatus] = BLOCKING_STATUSES) -> bool:
        return self.status in blocking_statuses
    
    def interval(self) -> BookedInterval:
        return BookedInterval(start_time=self.start_time, end_time=self.end_time)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "serviceId": self.service_id,
            "technicianId": self.technician_id,
            "customerId": self.customer_id,
            "date": self.date.isoformat(),
            "startTime": self.start_time.format(),
            "endTime": self.end_time.format(),
            "status": self.status.value,
            "amount": self.amount,
        }
