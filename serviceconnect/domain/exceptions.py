"""
Domain-specific exception hierarchy for ServiceConnect.

Each error carries an ``http_status`` hint so a web layer can map it to a
response without inspecting messages.
"""


class ServiceConnectError(Exception):
    """Base class for all application-level errors."""
    
    http_status = 500


class InvalidInputError(ServiceConnectError, ValueError):
    """Raised when a caller passes malformed data (bad time strings, negative durations)."""
    
    http_status = 400


class InvalidDateError(InvalidInputError):
    """Raised when a requested date is missing or cannot be parsed."""


class NotFoundError(ServiceConnectError):
    """Raised when a referenced record does not exist."""
    
    http_status = 404


class ServiceNotFoundError(NotFoundError):
    """Raised when a service id is unknown."""


class BookingNotFoundError(NotFoundError):
    """Raised when a booking id is unknown."""


class TechnicianNotFoundError(NotFoundError):
    """Raised when a technician id is unknown."""


class NotAuthorizedError(ServiceConnectError):
    """Raised when a technician acts on a booking that is not theirs."""
    
    http_status = 403


class BookingConflictError(ServiceConnectError):
    """Raised when a requested start time is no longer bookable."""
    
    http_status = 409


class InvalidStatusTransitionError(ServiceConnectError):
    """Raised when a booking status change is not allowed."""
    
    http_status = 409


class BackendAPIError(ServiceConnectError):
    """Raised when the remote ServiceConnect backend cannot be reached or answers with an error."""
    
    http_status = 502
