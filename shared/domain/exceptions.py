"""
Domain Errors

Typed failures raised by the domain and application layers.
Callers (transport adapters, Celery tasks) catch these and translate
them into their own representation; nothing here is retried by the core.
"""

from datetime import date
from typing import Any


class DomainError(Exception):
    """Base class for every failure the core reports to its callers"""

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message


class InvalidInputError(DomainError):
    """Malformed or missing input"""


class InvalidRangeError(InvalidInputError):
    """Date range whose end is not after its start"""


class InvalidStayLengthError(InvalidInputError):
    """Stay is empty, inverted, or outside the listing's min/max stay"""


class ListingUnavailableError(DomainError):
    """Listing does not exist or is not published"""


class DateBlockedError(DomainError):
    """A date of the requested stay is explicitly closed in the calendar"""

    def __init__(self, blocked_date: date, listing_id: Any = None):
        super().__init__(f"Date {blocked_date.isoformat()} is blocked for listing {listing_id}")
        self.blocked_date = blocked_date
        self.listing_id = listing_id


class OverlapError(DomainError):
    """Requested stay overlaps an active booking of the same listing"""

    def __init__(self, booking_id: Any = None, listing_id: Any = None):
        if booking_id is not None:
            message = f"Dates overlap existing booking {booking_id}"
        else:
            message = f"Dates overlap an active booking of listing {listing_id}"
        super().__init__(message)
        self.booking_id = booking_id
        self.listing_id = listing_id


class InvalidTransitionError(DomainError):
    """Status change not allowed from the current state"""

    def __init__(self, current: str, target: str, entity: str = 'booking'):
        super().__init__(f"Cannot move {entity} from {current} to {target}")
        self.current = current
        self.target = target


class TooLateToCancelError(DomainError):
    """Confirmed booking can no longer be cancelled (check-in reached)"""


class PrematureCompletionError(DomainError):
    """Booking cannot be completed before its checkout date has passed"""


class NotFoundError(DomainError):
    """Referenced entity does not exist"""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class UnauthorizedError(DomainError):
    """Acting user may not perform the requested action"""


class PriceOverflowError(DomainError, OverflowError):
    """Computed price does not fit into a signed 64-bit integer"""


class CancelledError(DomainError):
    """Caller's deadline expired before the operation could finish"""

    def __init__(self, operation: str):
        super().__init__(f"Operation {operation} cancelled: deadline exceeded")
        self.operation = operation


class StorageError(DomainError):
    """
    Persistence failure

    Carries the failed operation and entity id; the driver error is kept
    as ``__cause__`` and is not part of the message.
    """

    def __init__(self, operation: str, entity_id: Any = None):
        suffix = f" ({entity_id})" if entity_id is not None else ''
        super().__init__(f"Storage failure during {operation}{suffix}")
        self.operation = operation
        self.entity_id = entity_id
