"""Append-only notification log with synchronous subscribers."""

from typing import Callable

from shared.schemas.events import RegistryEvent
from shared.utils.logging import get_logger

logger = get_logger(__name__)

Subscriber = Callable[[RegistryEvent], None]


class NotificationLog:
    """Collects the notifications raised by registry operations.

    Operations emit only after their state mutation succeeded, so every entry
    describes a change that is already visible through the read queries.
    """

    def __init__(self) -> None:
        self._entries: list[RegistryEvent] = []
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        """Register a callback invoked synchronously for every notification."""
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.remove(subscriber)

    def emit(self, event: RegistryEvent) -> None:
        """Append a notification and deliver it to subscribers.

        A failing subscriber is logged and skipped: the transition it reports
        has already been applied and is not undone.
        """
        self._entries.append(event)
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception as e:
                logger.error(
                    "notification_subscriber_failed",
                    event_type=event.event_type,
                    subscriber=getattr(subscriber, "__name__", repr(subscriber)),
                    error=str(e),
                )

    @property
    def entries(self) -> list[RegistryEvent]:
        """Notifications in emission order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
