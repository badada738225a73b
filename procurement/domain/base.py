"""Domain building blocks shared by the procurement model.

A request is persisted as one JSON document, so the aggregate root carries
the version of the document it was loaded from. Workflow steps record
events on the aggregate; the application layer drains and logs them after
the write went through.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable value compared by its fields."""


@dataclass
class Entity(ABC):
    """Object identified by a string id.

    Items are identified by their id within the owning request, so an
    edited copy of an item still equals the original.
    """

    id: str

    def __eq__(self, other: object) -> bool:
        return isinstance(other, type(self)) and self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Something that happened to a request.

    Attributes:
        aggregate_id: ID of the request.
        actor: Email of the user who caused it.
        occurred_at: When it happened (UTC).
    """

    event_type: ClassVar[str]

    aggregate_id: str = ""
    actor: str = ""
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def details(self) -> dict[str, Any]:
        """Event-specific fields."""
        return {}

    def log_fields(self) -> dict[str, Any]:
        """Flat key-value pairs for one structured log line."""
        return {
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "actor": self.actor,
            "occurred_at": self.occurred_at.isoformat(),
            **self.details(),
        }


@dataclass(kw_only=True, eq=False)
class AggregateRoot(Entity):
    """Entity that guards a consistency boundary and is stored as one document.

    Attributes:
        version: Version of the stored document; 1 right after creation.
    """

    version: int = field(default=1, compare=False)
    _pending_events: list[DomainEvent] = field(
        default_factory=list, init=False, repr=False, compare=False
    )

    def _record_event(self, event: DomainEvent) -> None:
        self._pending_events.append(event)

    def collect_events(self) -> list[DomainEvent]:
        """Return the events recorded since the last call and forget them."""
        events, self._pending_events = self._pending_events, []
        return events
