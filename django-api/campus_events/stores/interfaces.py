"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. All methods are
coroutines: implementations talk to I/O-bound backends.
"""

from abc import ABC, abstractmethod

from campus_events.domain import (
    Event,
    EventDraft,
    EventId,
    Notification,
    NotificationId,
    NotificationKind,
    UserId,
)


class EventStore(ABC):
    """Interface for event and registration persistence operations."""

    @abstractmethod
    async def list_events(self) -> list[Event]:
        """Return all events ordered by created_at descending."""
        ...

    @abstractmethod
    async def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    async def event_exists(self, event_id: EventId) -> bool:
        """Check if an event exists."""
        ...

    @abstractmethod
    async def create_event(self, draft: EventDraft) -> Event:
        """Persist a new event and return it."""
        ...

    @abstractmethod
    async def update_event(self, event_id: EventId, draft: EventDraft) -> Event:
        """Replace the editable fields of an event.

        Raises:
            MissingRowError: If the event does not exist.
        """
        ...

    @abstractmethod
    async def delete_event(self, event_id: EventId) -> frozenset[UserId]:
        """Delete an event and every registration referencing it.

        Returns the users whose registrations were removed, read in the same
        operation as the delete.

        Raises:
            MissingRowError: If the event does not exist.
        """
        ...

    @abstractmethod
    async def fetch_registrations(self, event_id: EventId) -> frozenset[UserId]:
        """Return the users registered for one event."""
        ...

    @abstractmethod
    async def fetch_all_registrations(self) -> dict[EventId, frozenset[UserId]]:
        """Return registrations for every event in a single call.

        Events without registrations may be absent from the mapping.
        """
        ...

    @abstractmethod
    async def fetch_user_registrations(self, user_id: UserId) -> frozenset[EventId]:
        """Return the events a user is registered for."""
        ...

    @abstractmethod
    async def insert_registration(self, event_id: EventId, user_id: UserId) -> None:
        """Register a user, as one conditional operation.

        The duplicate check, the capacity check and the insert must not
        interleave with another insert for the same event.

        Raises:
            DuplicateKeyError: If the user is already registered.
            CapacityExceededError: If the event is full.
            MissingRowError: If the event does not exist.
        """
        ...

    @abstractmethod
    async def delete_registration(self, event_id: EventId, user_id: UserId) -> None:
        """Remove a registration.

        Raises:
            MissingRowError: If the user is not registered for the event.
        """
        ...


class NotificationStore(ABC):
    """Interface for per-user notification persistence."""

    @abstractmethod
    async def add(
        self,
        recipient_id: UserId,
        kind: NotificationKind,
        title: str,
        message: str,
        event_id: EventId | None = None,
    ) -> Notification:
        ...

    @abstractmethod
    async def list_for_user(self, recipient_id: UserId) -> list[Notification]:
        """Return a user's notifications, newest first."""
        ...

    @abstractmethod
    async def mark_read(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        """Mark one notification read. Returns False if the user has no such notification."""
        ...

    @abstractmethod
    async def mark_all_read(self, recipient_id: UserId) -> int:
        """Mark every unread notification read and return how many changed."""
        ...

    @abstractmethod
    async def delete(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        """Delete one notification. Returns False if the user has no such notification."""
        ...
