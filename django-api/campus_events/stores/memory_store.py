"""In-memory store implementations.

Process-local storage for development and tests. Every conditional
operation runs without an ``await`` between its check and its write, so it
is atomic with respect to other coroutines on the same event loop. Not
suitable for production use.
"""

from __future__ import annotations

import uuid
from dataclasses import replace

from campus_events.domain import (
    Event,
    EventDraft,
    EventId,
    Notification,
    NotificationId,
    NotificationKind,
    UserId,
)
from campus_events.domain.status import Clock, utc_now
from campus_events.stores.errors import (
    CapacityExceededError,
    DuplicateKeyError,
    MissingRowError,
)
from campus_events.stores.interfaces import EventStore, NotificationStore


class InMemoryEventStore(EventStore):
    """Dictionary-backed event store.

    Attributes:
        events: Mapping of event ID to Event.
        registrations: Mapping of event ID to the set of registered users.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self.events: dict[EventId, Event] = {}
        self.registrations: dict[EventId, set[UserId]] = {}

    async def list_events(self) -> list[Event]:
        return sorted(self.events.values(), key=lambda e: e.created_at, reverse=True)

    async def get_event(self, event_id: EventId) -> Event | None:
        return self.events.get(event_id)

    async def event_exists(self, event_id: EventId) -> bool:
        return event_id in self.events

    async def create_event(self, draft: EventDraft) -> Event:
        now = self._clock()
        event = Event(
            id=EventId(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **vars(draft),
        )
        self.events[event.id] = event
        self.registrations[event.id] = set()
        return event

    async def update_event(self, event_id: EventId, draft: EventDraft) -> Event:
        current = self.events.get(event_id)
        if current is None:
            raise MissingRowError(str(event_id))
        event = replace(current, updated_at=self._clock(), **vars(draft))
        self.events[event_id] = event
        return event

    async def delete_event(self, event_id: EventId) -> frozenset[UserId]:
        if self.events.pop(event_id, None) is None:
            raise MissingRowError(str(event_id))
        return frozenset(self.registrations.pop(event_id, ()))

    async def fetch_registrations(self, event_id: EventId) -> frozenset[UserId]:
        return frozenset(self.registrations.get(event_id, ()))

    async def fetch_all_registrations(self) -> dict[EventId, frozenset[UserId]]:
        return {event_id: frozenset(users) for event_id, users in self.registrations.items()}

    async def fetch_user_registrations(self, user_id: UserId) -> frozenset[EventId]:
        return frozenset(
            event_id for event_id, users in self.registrations.items() if user_id in users
        )

    async def insert_registration(self, event_id: EventId, user_id: UserId) -> None:
        event = self.events.get(event_id)
        if event is None:
            raise MissingRowError(str(event_id))
        users = self.registrations.setdefault(event_id, set())
        if user_id in users:
            raise DuplicateKeyError(f"{event_id}/{user_id}")
        if len(users) >= event.capacity.value:
            raise CapacityExceededError(str(event_id))
        users.add(user_id)

    async def delete_registration(self, event_id: EventId, user_id: UserId) -> None:
        users = self.registrations.get(event_id)
        if users is None or user_id not in users:
            raise MissingRowError(f"{event_id}/{user_id}")
        users.remove(user_id)


class InMemoryNotificationStore(NotificationStore):
    """List-backed notification store."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self.notifications: dict[NotificationId, Notification] = {}

    async def add(
        self,
        recipient_id: UserId,
        kind: NotificationKind,
        title: str,
        message: str,
        event_id: EventId | None = None,
    ) -> Notification:
        notification = Notification(
            id=NotificationId(uuid.uuid4()),
            recipient_id=recipient_id,
            kind=kind,
            title=title,
            message=message,
            event_id=event_id,
            is_read=False,
            created_at=self._clock(),
        )
        self.notifications[notification.id] = notification
        return notification

    async def list_for_user(self, recipient_id: UserId) -> list[Notification]:
        owned = [n for n in self.notifications.values() if n.recipient_id == recipient_id]
        return sorted(owned, key=lambda n: n.created_at, reverse=True)

    def _owned(self, recipient_id: UserId, notification_id: NotificationId) -> Notification | None:
        notification = self.notifications.get(notification_id)
        if notification is None or notification.recipient_id != recipient_id:
            return None
        return notification

    async def mark_read(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        notification = self._owned(recipient_id, notification_id)
        if notification is None:
            return False
        self.notifications[notification_id] = replace(notification, is_read=True)
        return True

    async def mark_all_read(self, recipient_id: UserId) -> int:
        changed = 0
        for notification in list(self.notifications.values()):
            if notification.recipient_id == recipient_id and not notification.is_read:
                self.notifications[notification.id] = replace(notification, is_read=True)
                changed += 1
        return changed

    async def delete(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        if self._owned(recipient_id, notification_id) is None:
            return False
        del self.notifications[notification_id]
        return True
