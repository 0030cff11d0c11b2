"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class BookingRequested(DomainEvent):
    """
    Event: A new booking was admitted (status CREATED)

    Triggers:
    - Send request acknowledgement to guest
    """
    booking_id: UUID
    listing_id: UUID
    user_id: UUID
    check_in: date
    check_out: date
    total_price: int


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: Host or admin confirmed the booking (CREATED -> CONFIRMED)

    Triggers:
    - Send booking confirmation to guest
    """
    booking_id: UUID
    listing_id: UUID
    user_id: UUID


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled

    Its dates stop counting in overlap checks from this point on.

    Triggers:
    - Notify guest
    """
    booking_id: UUID
    listing_id: UUID
    user_id: UUID
    reason: str
    old_status: str


@dataclass
class BookingCompleted(DomainEvent):
    """Event: Stay finished (CONFIRMED -> COMPLETED)"""
    booking_id: UUID
    listing_id: UUID
    user_id: UUID
