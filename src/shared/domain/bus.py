"""Publish/subscribe contracts for order and payment events.

Handlers are plain callables-with-a-method so order side effects (history
logging, notifications) stay out of the placement transaction.
"""

from __future__ import annotations

from typing import Generic, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

EventT = TypeVar("EventT", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[EventT]):
    def handle(self, event: EventT) -> None:
        """React to one committed event; must not raise for business outcomes."""
        ...


class IEventBus(Protocol):
    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(
        self, event_class: Type[EventT], handler: IEventHandler[EventT]
    ) -> None:
        """Register *handler* for *event_class*; duplicate registrations are ignored."""
        ...
