"""
Domain building blocks for the reservation engine.

Reservations are aggregates: every state change they go through is recorded
as a DomainEvent and handed to the unit of work, which publishes it once the
transaction has committed. Ledger entries are plain entities; Money and
TimeSlot are value objects.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID, uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True, eq=False)
class Entity(ABC):
    """Identified by ``id``; ``updated_at`` moves on every state change."""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def touch(self):
        self.updated_at = utcnow()


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable, compared field by field."""


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Consistency boundary that records what happened to it.

    Events stay on the aggregate until a unit of work pulls them; a store
    handing out copies clears them so a reload never replays old events.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    def pull_events(self) -> List['DomainEvent']:
        """Return the pending events and forget them."""
        events, self._events = self._events, []
        return events

    @property
    def events(self) -> List['DomainEvent']:
        return list(self._events)


@dataclass(kw_only=True)
class DomainEvent:
    """Something that happened to an aggregate, published after commit."""
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: UUID | None = None
