"""
Base Domain Classes

Building blocks shared by every bounded context:
- DomainEvent: something that happened and is published after commit
- EventRecorder: mixin that lets a model collect events for the unit of work
- ValueObject: immutable objects compared by value
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are used to communicate between bounded contexts.
    """
    event_id: UUID = field(default_factory=uuid4, init=False)
    occurred_at: datetime = field(default_factory=datetime.now, init=False)
    aggregate_id: Optional[int] = field(default=None, init=False)


class EventRecorder:
    """
    Mixin for aggregate roots backed by Django models

    Events are kept in memory only. ``DjangoUnitOfWork.collect_events``
    drains them and publishes them once the transaction commits.
    """

    def add_event(self, event: DomainEvent):
        """Add a domain event to be published"""
        if event.aggregate_id is None:
            event.aggregate_id = getattr(self, 'pk', None)
        self._pending_events().append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self._pending_events().clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return list(self._pending_events())

    def _pending_events(self) -> List[DomainEvent]:
        if '_domain_events' not in self.__dict__:
            self.__dict__['_domain_events'] = []
        return self.__dict__['_domain_events']
