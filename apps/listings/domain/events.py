"""
Listing Domain Events
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class ListingCreated(DomainEvent):
    """Event: A host created a listing (in DRAFT)"""
    listing_id: UUID
    host_id: UUID


@dataclass
class ListingStatusChanged(DomainEvent):
    """
    Event: Listing moved through its lifecycle

    Published/unpublished/blocked/deleted listings change what the
    admission engine accepts.
    """
    listing_id: UUID
    old_status: str
    new_status: str
