"""
REST client for a remote ServiceConnect backend.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import BackendAPIError, InvalidInputError
from ..domain.models import Booking, BookingStatus, Service, Technician

logger = logging.getLogger(__name__)


class ServiceConnectClient:
    """
    Client for the ServiceConnect marketplace API.
    
    Satisfies ``MarketplaceRepositoryProtocol`` so the application services
    can run against the live backend instead of a local data file.
    """
    
    def __init__(self, base_url: str, token: str = "", timeout: int = 30):
        """
        Initialize the API client.
        
        Args:
            base_url: API root, e.g. ``https://example.com/api``
            token: Optional bearer token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
    
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Any:
        """
        Send a request and decode the JSON body.
        
        Returns:
            Decoded JSON, or None for a 404 when ``allow_not_found`` is set
        
        Raises:
            BackendAPIError: If the request fails or the backend answers with an error
        """
        url = f"{self.base_url}{path}"
        
        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise BackendAPIError(f"Failed to reach ServiceConnect API: {e}") from e
        
        if allow_not_found and response.status_code == 404:
            return None
        
        try:
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            logger.error("%s %s returned %s", method, url, response.status_code)
            raise BackendAPIError(
                f"ServiceConnect API error {response.status_code}: {self._error_message(response)}"
            ) from e
        except ValueError as e:
            raise BackendAPIError(f"Invalid JSON from {url}") from e
    
    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or ""
        if isinstance(body, dict):
            return str(body.get("error") or body.get("message") or body)
        return str(body)
    
    def _parse_service(self, data: Dict[str, Any]) -> Service:
        """
        Parse a service payload that embeds its technician.
        
        Response format:
        {
            "id": "1",
            "name": "...",
            "duration": 120,
            "price": 1500,
            "technician": {"id": "...", "availability": {...}, "workingHours": {...}}
        }
        """
        try:
            technician = Technician.from_mapping(data["technician"])
            return Service.from_mapping(data, technician)
        except (KeyError, TypeError) as e:
            raise BackendAPIError(f"Unexpected service payload: missing {e}") from e
        except InvalidInputError as e:
            raise BackendAPIError(f"Invalid service payload: {e}") from e
    
    def _parse_technician(self, data: Any) -> Technician:
        try:
            return Technician.from_mapping(data)
        except (KeyError, TypeError) as e:
            raise BackendAPIError(f"Unexpected technician payload: missing {e}") from e
        except InvalidInputError as e:
            raise BackendAPIError(f"Invalid technician payload: {e}") from e
    
    def _parse_bookings(self, data: Any) -> List[Booking]:
        if not isinstance(data, list):
            raise BackendAPIError("Expected a list of bookings")
        try:
            return [Booking.from_mapping(item) for item in data]
        except (KeyError, TypeError) as e:
            raise BackendAPIError(f"Unexpected booking payload: missing {e}") from e
        except InvalidInputError as e:
            raise BackendAPIError(f"Invalid booking payload: {e}") from e
    
    def get_service(self, service_id: str) -> Optional[Service]:
        data = self._request("GET", f"/services/{service_id}", allow_not_found=True)
        if data is None:
            return None
        return self._parse_service(data)
    
    def list_services(self) -> List[Service]:
        data = self._request("GET", "/services")
        if not isinstance(data, list):
            raise BackendAPIError("Expected a list of services")
        return [self._parse_service(item) for item in data]
    
    def get_technician(self, technician_id: str) -> Optional[Technician]:
        data = self._request("GET", f"/technicians/{technician_id}", allow_not_found=True)
        if data is None:
            return None
        return self._parse_technician(data)
    
    def save_technician(self, technician: Technician) -> Technician:
        data = self._request(
            "PUT",
            f"/technicians/{technician.id}/schedule",
            json={
                "availability": technician.availability.to_dict(),
                "workingHours": technician.working_hours.to_dict(),
            },
        )
        return self._parse_technician(data)
    
    def list_bookings_for_date(self, service_id: str, booking_date: date) -> List[Booking]:
        data = self._request(
            "GET",
            "/bookings",
            params={"serviceId": service_id, "date": booking_date.isoformat()},
        )
        return self._parse_bookings(data)
    
    def list_technician_bookings(
        self,
        technician_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Booking]:
        params: Dict[str, str] = {"technicianId": technician_id}
        if start_date is not None:
            params["startDate"] = start_date.isoformat()
        if end_date is not None:
            params["endDate"] = end_date.isoformat()
        return self._parse_bookings(self._request("GET", "/bookings", params=params))
    
    def list_bookings(
        self,
        *,
        technician_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> List[Booking]:
        params: Dict[str, str] = {}
        if technician_id is not None:
            params["technicianId"] = technician_id
        if customer_id is not None:
            params["customerId"] = customer_id
        if status is not None:
            params["status"] = status.value
        return self._parse_bookings(self._request("GET", "/bookings", params=params))
    
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        data = self._request("GET", f"/bookings/{booking_id}", allow_not_found=True)
        if data is None:
            return None
        return self._parse_bookings([data])[0]
    
    def add_booking(self, booking: Booking) -> Booking:
        payload = booking.to_dict()
        if not payload["id"]:
            del payload["id"]
        return self._parse_bookings([self._request("POST", "/bookings", json=payload)])[0]
    
    def save_booking(self, booking: Booking) -> Booking:
        data = self._request(
            "PATCH",
            f"/bookings/{booking.id}",
            json={"status": booking.status.value},
        )
        return self._parse_bookings([data])[0]
