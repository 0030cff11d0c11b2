"""
Domain Building Blocks

- Entity: mutable object identified by its id (calendar entry, user)
- ValueObject: immutable object compared by value (address, date range)
- Aggregate: entity that guards a consistency boundary and records
  domain events (listing, booking, user)
- DomainEvent: fact recorded by an aggregate, published after commit
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4


def utcnow() -> datetime:
    """Timezone-aware current time used for all entity timestamps"""
    return datetime.now(timezone.utc)


@dataclass(kw_only=True, eq=False)
class Entity(ABC):
    """
    Identity plus creation and modification timestamps

    Equality and hashing use the id only. Subclasses are declared with
    ``eq=False`` so the generated dataclass __eq__ does not replace it.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def touch(self):
        """Mark the entity as modified now"""
        self.updated_at = utcnow()


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable, no identity; equal when all attributes are equal"""


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Aggregate root

    State changes record events with add_event(); the unit of work takes
    them with collect_events() and publishes them once the transaction has
    committed.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False, compare=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Copy of the events recorded since the last collection"""
        return self._events.copy()


@dataclass(kw_only=True)
class DomainEvent:
    """
    Something that happened to an aggregate

    Handlers receive the event object itself; to_dict() is the flat form
    used in log records.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: UUID | None = None

    def to_dict(self) -> dict:
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }
