"""
Identity, versioning and event bookkeeping shared by cart entities.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class DomainEvent(ABC):
    """Something that happened to a cart, named in past tense."""
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utc_now)

    @property
    @abstractmethod
    def event_type(self) -> str:
        pass

    @abstractmethod
    def payload(self) -> Dict[str, Any]:
        """Event specific fields, JSON friendly."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': str(self.event_id),
            'event_type': self.event_type,
            'occurred_at': self.occurred_at.isoformat(),
            'data': self.payload(),
        }


@dataclass
class Entity(ABC):
    """
    Object with an identity of its own.

    Two entities are the same entity when their IDs match, whatever
    their other fields hold.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Entity) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def touch(self) -> None:
        self.updated_at = utc_now()


@dataclass
class AggregateRoot(Entity):
    """
    Entity that owns a cluster of objects and the events raised on them.

    Events are kept until the caller pulls them; ``version`` counts
    completed changes of the aggregate.
    """
    _pending_events: List[DomainEvent] = field(default_factory=list, repr=False, compare=False)
    version: int = field(default=1, compare=False)

    def record_event(self, event: DomainEvent) -> None:
        self._pending_events.append(event)

    def pull_events(self) -> List[DomainEvent]:
        """Return the pending events and forget them."""
        events, self._pending_events = self._pending_events, []
        return events

    @property
    def pending_events(self) -> List[DomainEvent]:
        return list(self._pending_events)

    def bump_version(self) -> None:
        self.version += 1
        self.touch()
