"""
Listing Domain Entities

Core business entities for the listing domain:
- Listing: Aggregate representing a rentable property
- ListingStatus: FSM states for the listing lifecycle
- Address: Value object owned by the listing
- ListingImage: Image reference owned by the listing
- Availability: Per-date calendar entry (bookability + price override)
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List
from uuid import UUID, uuid4

from shared.domain.base import Aggregate, Entity, ValueObject
from shared.domain.exceptions import InvalidInputError, InvalidTransitionError


class ListingStatus(Enum):
    """
    Listing Status Finite State Machine

    State transitions:
    - DRAFT -> PUBLISHED (host publishes)
    - DRAFT -> DELETED
    - PUBLISHED -> DRAFT (host unpublishes)
    - PUBLISHED -> BLOCKED (admin moderation)
    - PUBLISHED -> DELETED
    - BLOCKED -> PUBLISHED (admin lifts the block)
    - BLOCKED -> DELETED
    DELETED is terminal and the listing is immutable afterwards.
    """
    DRAFT = 'draft'
    PUBLISHED = 'published'
    BLOCKED = 'blocked'
    DELETED = 'deleted'


LISTING_TRANSITIONS = {
    ListingStatus.DRAFT: frozenset({ListingStatus.PUBLISHED, ListingStatus.DELETED}),
    ListingStatus.PUBLISHED: frozenset({
        ListingStatus.DRAFT,
        ListingStatus.BLOCKED,
        ListingStatus.DELETED,
    }),
    ListingStatus.BLOCKED: frozenset({ListingStatus.PUBLISHED, ListingStatus.DELETED}),
    ListingStatus.DELETED: frozenset(),
}


@dataclass(frozen=True)
class Address(ValueObject):
    country: str
    city: str
    street: str = ''
    house: str = ''
    latitude: float | None = None
    longitude: float | None = None

    def __post_init__(self):
        if not self.country or not self.city:
            raise InvalidInputError("Address requires country and city")
        if self.latitude is not None and not -90 <= self.latitude <= 90:
            raise InvalidInputError(f"Latitude out of range: {self.latitude}")
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            raise InvalidInputError(f"Longitude out of range: {self.longitude}")

    def __str__(self):
        parts = [self.street, self.house, self.city, self.country]
        return ', '.join(part for part in parts if part)


@dataclass
class ListingImage:
    url: str
    position: int = 0
    id: UUID = field(default_factory=uuid4)


@dataclass(eq=False)
class Listing(Aggregate):
    """
    Listing Aggregate Root

    Key invariants:
    - 0 < min_stay_days <= max_stay_days
    - price_per_day is a non-negative amount in minor currency units
    - status changes follow LISTING_TRANSITIONS
    - a DELETED listing cannot be modified
    """
    host_id: UUID
    title: str
    description: str
    price_per_day: int
    min_stay_days: int
    max_stay_days: int
    address: Address
    status: ListingStatus = ListingStatus.DRAFT
    images: List[ListingImage] = field(default_factory=list)

    def __post_init__(self):
        self._validate()

    def _validate(self):
        if not self.title or not self.title.strip():
            raise InvalidInputError("Listing title is required")
        if not isinstance(self.price_per_day, int) or self.price_per_day < 0:
            raise InvalidInputError("price_per_day must be a non-negative integer amount")
        if not isinstance(self.address, Address):
            raise InvalidInputError("Listing address is required")
        for name in ('min_stay_days', 'max_stay_days'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidInputError(f"{name} must be an integer number of nights")
        if self.min_stay_days <= 0 or self.max_stay_days <= 0:
            raise InvalidInputError("Stay bounds must be positive")
        if self.min_stay_days > self.max_stay_days:
            raise InvalidInputError(
                f"min_stay_days ({self.min_stay_days}) exceeds max_stay_days ({self.max_stay_days})"
            )

    def _ensure_mutable(self):
        if self.status is ListingStatus.DELETED:
            raise InvalidTransitionError(self.status.value, 'modified', entity='listing')

    def update_details(self, **changes):
        """
        Change descriptive and pricing attributes

        Accepted keys: title, description, price_per_day, min_stay_days,
        max_stay_days, address. Invariants are re-checked and the change is
        rolled back if they fail.
        """
        self._ensure_mutable()

        allowed = {'title', 'description', 'price_per_day', 'min_stay_days', 'max_stay_days', 'address'}
        unknown = set(changes) - allowed
        if unknown:
            raise InvalidInputError(f"Unknown listing fields: {', '.join(sorted(unknown))}")

        previous = {name: getattr(self, name) for name in changes}
        for name, value in changes.items():
            setattr(self, name, value)
        try:
            self._validate()
        except InvalidInputError:
            for name, value in previous.items():
                setattr(self, name, value)
            raise
        self.touch()

    def replace_images(self, urls: List[str]):
        self._ensure_mutable()
        self.images = [ListingImage(url=url, position=index) for index, url in enumerate(urls)]
        self.touch()

    def change_status(self, target: ListingStatus):
        """Move to ``target`` following LISTING_TRANSITIONS"""
        if target not in LISTING_TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.status.value, target.value, entity='listing')

        from apps.listings.domain.events import ListingStatusChanged

        old_status = self.status
        self.status = target
        self.touch()

        self.add_event(ListingStatusChanged(
            aggregate_id=self.id,
            listing_id=self.id,
            old_status=old_status.value,
            new_status=target.value,
        ))

    def accepts_stay_of(self, nights: int) -> bool:
        return self.min_stay_days <= nights <= self.max_stay_days

    @property
    def is_published(self) -> bool:
        return self.status is ListingStatus.PUBLISHED

    @property
    def is_deleted(self) -> bool:
        return self.status is ListingStatus.DELETED

    @property
    def image_ids(self) -> List[UUID]:
        return [image.id for image in sorted(self.images, key=lambda image: image.position)]

    def __str__(self):
        return f"Listing {self.title} ({self.status.value})"


@dataclass(eq=False)
class Availability(Entity):
    """
    Calendar entry for one listing and one date

    Availability is calendar metadata only: whether the host opened the
    date and at what price. Occupancy comes from active bookings, so
    bookings never rewrite these rows.
    """
    listing_id: UUID
    date: date
    is_available: bool = True
    price_override: int | None = None

    def __post_init__(self):
        if self.price_override is not None and (
            not isinstance(self.price_override, int) or self.price_override < 0
        ):
            raise InvalidInputError("price_override must be a non-negative integer amount")

    def apply(self, is_available: bool, price_override: int | None):
        self.is_available = is_available
        self.price_override = price_override
        self.__post_init__()
        self.touch()
