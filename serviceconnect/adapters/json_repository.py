"""
JSON file backed marketplace store for local and offline use.
"""

import json
import logging
import uuid
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.exceptions import BookingNotFoundError, InvalidInputError, TechnicianNotFoundError
from ..domain.models import Booking, BookingStatus, Service, Technician

logger = logging.getLogger(__name__)

SAMPLE_DATA_FILE = Path(__file__).parent / "sample_marketplace.json"


class JsonMarketplaceRepository:
    """
    Repository that keeps technicians, services and bookings in memory.
    
    Data is loaded from a JSON document shaped like the backend API
    responses (camelCase keys)::
        
        {
            "technicians": [{"id": ..., "availability": {...}, "workingHours": {...}}],
            "services": [{"id": ..., "duration": 60, "technicianId": ...}],
            "bookings": [{"id": ..., "serviceId": ..., "date": "2024-11-25", ...}]
        }
    
    Changes stay in memory until ``save()`` is called.
    """
    
    def __init__(self, data: Optional[Dict[str, Any]] = None, path: Optional[Path] = None):
        """
        Initialize the repository.
        
        Args:
            data: Parsed JSON document (empty store if omitted)
            path: File the data came from; ``save()`` writes back to it
        """
        self.path = path
        self._technicians: Dict[str, Technician] = {}
        self._services: Dict[str, Service] = {}
        self._bookings: Dict[str, Booking] = {}
        self._load(data or {})
    
    @classmethod
    def from_file(cls, path: Path) -> "JsonMarketplaceRepository":
        """
        Load a repository from a JSON file.
        
        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not valid JSON
        """
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {path}")
        
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
        
        if not isinstance(data, dict):
            raise ValueError("Data file must contain an object at the root level.")
        
        return cls(data=data, path=path)
    
    @classmethod
    def sample(cls) -> "JsonMarketplaceRepository":
        """Load the sample marketplace shipped with the package (read-only use)."""
        repository = cls.from_file(SAMPLE_DATA_FILE)
        repository.path = None
        return repository
    
    @staticmethod
    def _section(data: Dict[str, Any], name: str) -> List[Dict[str, Any]]:
        """Return one top-level list; a missing or null section is empty."""
        records = data.get(name) or []
        if not isinstance(records, list):
            raise InvalidInputError(f"'{name}' must be a list in marketplace data")
        for raw in records:
            if not isinstance(raw, dict):
                raise InvalidInputError(f"Entries of '{name}' must be objects, got {raw!r}")
        return records
    
    def _load(self, data: Dict[str, Any]) -> None:
        """Parse the raw document into domain objects."""
        try:
            for raw in self._section(data, "technicians"):
                technician = Technician.from_mapping(raw)
                self._technicians[technician.id] = technician
            
            for raw in self._section(data, "services"):
                technician_id = str(raw["technicianId"])
                technician = self._technicians.get(technician_id)
                if technician is None:
                    raise InvalidInputError(
                        f"Service {raw.get('id')} references unknown technician {technician_id}"
                    )
                service = Service.from_mapping(raw, technician)
                self._services[service.id] = service
            
            for raw in self._section(data, "bookings"):
                booking = Booking.from_mapping(raw)
                self._bookings[booking.id] = booking
        except KeyError as exc:
            raise InvalidInputError(f"Missing field in marketplace data: {exc}") from exc
        
        logger.debug(
            "Loaded %d technician(s), %d service(s), %d booking(s)",
            len(self._technicians),
            len(self._services),
            len(self._bookings),
        )
    
    def get_technician(self, technician_id: str) -> Optional[Technician]:
        return self._technicians.get(str(technician_id))
    
    def save_technician(self, technician: Technician) -> Technician:
        """Replace a technician and repoint the services it offers."""
        if technician.id not in self._technicians:
            raise TechnicianNotFoundError(f"Technician not found: {technician.id}")
        self._technicians[technician.id] = technician
        for service_id, service in self._services.items():
            if service.technician.id == technician.id:
                self._services[service_id] = replace(service, technician=technician)
        return technician
    
    def get_service(self, service_id: str) -> Optional[Service]:
        return self._services.get(str(service_id))
    
    def list_services(self) -> List[Service]:
        return list(self._services.values())
    
    def list_bookings_for_date(self, service_id: str, booking_date: date) -> List[Booking]:
        return [
            booking
            for booking in self._bookings.values()
            if booking.service_id == str(service_id) and booking.date == booking_date
        ]
    
    def list_bookings(
        self,
        *,
        technician_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> List[Booking]:
        bookings = list(self._bookings.values())
        if technician_id is not None:
            bookings = [b for b in bookings if b.technician_id == str(technician_id)]
        if customer_id is not None:
            bookings = [b for b in bookings if b.customer_id == str(customer_id)]
        if status is not None:
            bookings = [b for b in bookings if b.status == status]
        return bookings
    
    def list_technician_bookings(
        self,
        technician_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Booking]:
        """Bookings of every service the technician offers, within an inclusive date range."""
        technician_id = str(technician_id)
        service_ids = {
            service.id
            for service in self._services.values()
            if service.technician.id == technician_id
        }
        bookings = [
            b for b in self._bookings.values()
            if b.service_id in service_ids or b.technician_id == technician_id
        ]
        if start_date is not None:
            bookings = [b for b in bookings if b.date >= start_date]
        if end_date is not None:
            bookings = [b for b in bookings if b.date <= end_date]
        return bookings
    
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(str(booking_id))
    
    def add_booking(self, booking: Booking) -> Booking:
        """Store a new booking, assigning an id if it has none."""
        stored = booking if booking.id else replace(booking, id=uuid.uuid4().hex)
        if stored.id in self._bookings:
            raise InvalidInputError(f"Booking {stored.id} already exists")
        self._bookings[stored.id] = stored
        return stored
    
    def save_booking(self, booking: Booking) -> Booking:
        if booking.id not in self._bookings:
            raise BookingNotFoundError(f"Booking not found: {booking.id}")
        self._bookings[booking.id] = booking
        return booking
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "technicians": [t.to_dict() for t in self._technicians.values()],
            "services": [s.to_dict() for s in self._services.values()],
            "bookings": [b.to_dict() for b in self._bookings.values()],
        }
    
    def save(self, path: Optional[Path] = None) -> Path:
        """
        Write the current state back to disk.
        
        Args:
            path: Target file; defaults to the file the data was loaded from
        
        Returns:
            The path written
        """
        target = path or self.path
        if target is None:
            raise ValueError("No data file to save to; pass an explicit path.")
        
        with open(target, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
            f.write("\n")
        
        logger.debug("Saved marketplace data to %s", target)
        return target
