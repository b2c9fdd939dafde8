"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or raise domain errors
"""

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Iterable, Mapping
from datetime import datetime
from typing import Any, TypeVar

from campus_events.cache import EVENT_LIST_KEY, event_key
from campus_events.domain import (
    CampusType,
    Capacity,
    CatalogSummary,
    Event,
    EventCategory,
    EventDraft,
    EventId,
    EventOverview,
    EventStatus,
    EventStatusClassifier,
    NotificationKind,
    UserId,
)
from campus_events.domain.catalog import group_by_status, matches
from campus_events.domain.errors import (
    EventNotFoundError,
    InvalidEventIdError,
    RepositoryError,
    UnknownOutcomeError,
    ValidationError,
)
from campus_events.domain.status import Clock, ensure_valid_window, utc_now
from campus_events.services.notification_service import NotificationService
from campus_events.services.registration_ledger import RegistrationLedger
from campus_events.stores.errors import MissingRowError, StoreError
from campus_events.stores.interfaces import EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

EDITABLE_FIELDS = frozenset(f.name for f in dataclasses.fields(EventDraft))


def parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except (TypeError, ValueError) as exc:
        raise InvalidEventIdError() from exc


def parse_user_id(user_id: str) -> UserId:
    try:
        return UserId(str(user_id))
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def build_draft(fields: Mapping[str, Any], base: EventDraft | None = None) -> EventDraft:
    """Build a validated draft from raw field values, on top of ``base`` if given.

    Raises:
        ValidationError: On unknown or missing fields, bad enum values,
            negative capacity, or an invalid time window.
    """
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {"description": "", "image_url": None}
    if base is not None:
        values.update(vars(base))
    values.update(fields)

    try:
        capacity = values["capacity"]
        draft = EventDraft(
            title=values["title"],
            description=values["description"] or "",
            category=EventCategory(values["category"]),
            location=values["location"],
            campus_type=CampusType(values["campus_type"]),
            organizer=values["organizer"],
            image_url=values["image_url"] or None,
            start_at=values["start_at"],
            end_at=values["end_at"],
            capacity=capacity if isinstance(capacity, Capacity) else Capacity(int(capacity)),
        )
    except KeyError as exc:
        raise ValidationError(f"Missing field: {exc.args[0]}") from exc
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from exc

    ensure_valid_window(draft.start_at, draft.end_at)
    return draft


class EventService:
    """Service for event catalog, registration and administration operations."""

    def __init__(
        self,
        store: EventStore,
        notifications: NotificationService,
        *,
        clock: Clock = utc_now,
        timeout: float | None = None,
        cache=None,
        cache_timeout: int = 60,
    ) -> None:
        self._store = store
        self._notifications = notifications
        self._classifier = EventStatusClassifier(clock)
        self._ledger = RegistrationLedger(store, timeout=timeout)
        self._timeout = timeout
        self._cache = cache
        self._cache_timeout = cache_timeout

    # -- catalog -----------------------------------------------------------

    async def list_events(self) -> list[Event]:
        """Return all events."""
        cached = await self._cache_get(EVENT_LIST_KEY)
        if cached is not None:
            return cached
        events = await self._read(self._store.list_events())
        await self._cache_set(EVENT_LIST_KEY, events)
        return events

    async def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = parse_event_id(event_id)
        cached = await self._cache_get(event_key(parsed))
        if cached is not None:
            return cached
        event = await self._read(self._store.get_event(parsed))
        if event is None:
            raise EventNotFoundError(event_id)
        await self._cache_set(event_key(parsed), event)
        return event

    async def browse(
        self,
        *,
        search: str = "",
        category: EventCategory | None = None,
        status: EventStatus | None = None,
        user_id: str | None = None,
    ) -> list[EventOverview]:
        """Return catalog overviews matching the filters, in catalog order."""
        events = await self.list_events()
        await self._refresh_registrations(e.id for e in events)
        viewer = parse_user_id(user_id) if user_id else None
        now = self._classifier.now()
        overviews = (self._overview(event, now, viewer) for event in events)
        return [
            o for o in overviews if matches(o, search=search, category=category, status=status)
        ]

    async def get_overview(self, event_id: str, user_id: str | None = None) -> EventOverview:
        event = await self.get_event(event_id)
        await self._refresh_registration(event.id)
        viewer = parse_user_id(user_id) if user_id else None
        return self._overview(event, self._classifier.now(), viewer)

    async def dashboard(self, user_id: str) -> dict[EventStatus, list[EventOverview]]:
        """Return the events a user is registered for, grouped by status."""
        viewer = parse_user_id(user_id)
        registered = await self._read(self._store.fetch_user_registrations(viewer))
        events = [e for e in await self.list_events() if e.id in registered]
        await self._refresh_registrations(e.id for e in events)
        now = self._classifier.now()
        return group_by_status(self._overview(event, now, viewer) for event in events)

    async def summary(self) -> CatalogSummary:
        events = await self.list_events()
        await self._refresh_registrations(e.id for e in events)
        now = self._classifier.now()
        statuses = [self._classifier.classify(event, now) for event in events]
        return CatalogSummary(
            total_events=len(events),
            upcoming=statuses.count(EventStatus.UPCOMING),
            ongoing=statuses.count(EventStatus.ONGOING),
            past=statuses.count(EventStatus.PAST),
            total_registrations=sum(self._ledger.count(event) for event in events),
        )

    # -- administration ----------------------------------------------------

    async def create_event(self, fields: Mapping[str, Any]) -> Event:
        """Create an event.

        Raises:
            ValidationError: If the fields do not form a valid event.
            RepositoryError: If the store fails.
            UnknownOutcomeError: If the store did not confirm the write.
        """
        draft = build_draft(fields)
        try:
            event = await self._write(self._store.create_event(draft))
        finally:
            await self._invalidate()
        logger.info("Created event %s (%s)", event.id, event.title)
        return event

    async def update_event(self, event_id: str, changes: Mapping[str, Any]) -> Event:
        """Apply changes to an event and notify its registrants.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            ValidationError: If the result would not be a valid event.
            UnknownOutcomeError: If the store did not confirm the write.
        """
        parsed = parse_event_id(event_id)
        current = await self._read(self._store.get_event(parsed))
        if current is None:
            raise EventNotFoundError(event_id)
        draft = build_draft(changes, base=current.to_draft())

        try:
            event = await self._write(self._store.update_event(parsed, draft))
        except MissingRowError as exc:
            raise EventNotFoundError(event_id) from exc
        finally:
            await self._invalidate(parsed)

        registrants = await self._registrants_for_notice(parsed)
        await self._notifications.notify(
            registrants,
            NotificationKind.EVENT_UPDATED,
            f"Event updated: {event.title}",
            f"Details of {event.title} have changed. Check the event page for the latest details.",
            event_id=event.id,
        )
        logger.info("Updated event %s", event.id)
        return event

    async def delete_event(self, event_id: str) -> None:
        """Delete an event with its registrations and notify the registrants.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            UnknownOutcomeError: If the store did not confirm the delete.
        """
        parsed = parse_event_id(event_id)
        event = await self._read(self._store.get_event(parsed))
        if event is None:
            raise EventNotFoundError(event_id)
        try:
            registrants = await self._write(self._store.delete_event(parsed))
        except MissingRowError as exc:
            raise EventNotFoundError(event_id) from exc
        finally:
            self._ledger.forget(parsed)
            await self._invalidate(parsed)

        await self._notifications.notify(
            registrants,
            NotificationKind.EVENT_CANCELLED,
            f"Event cancelled: {event.title}",
            f"{event.title} has been cancelled and your registration removed.",
            event_id=event.id,
        )
        logger.info("Deleted event %s with %d registrations", event.id, len(registrants))

    # -- registration ------------------------------------------------------

    async def register(self, event_id: str, user_id: str) -> EventOverview:
        """Register a user for an event.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            AlreadyRegisteredError: If the user is already registered.
            AtCapacityError: If the event is full.
            RepositoryError: If the store fails.
            UnknownOutcomeError: If the store did not confirm the registration.
        """
        event = await self.get_event(event_id)
        user = parse_user_id(user_id)
        (await self._ledger.register(event, user)).unwrap()

        await self._notifications.notify(
            [user],
            NotificationKind.REGISTRATION_CONFIRMED,
            f"Registered: {event.title}",
            f"You are registered for {event.title}.",
            event_id=event.id,
        )
        return self._overview(event, self._classifier.now(), user)

    async def unregister(self, event_id: str, user_id: str) -> EventOverview:
        """Remove a user's registration for an event.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            NotRegisteredError: If the user is not registered.
            RepositoryError: If the store fails.
            UnknownOutcomeError: If the store did not confirm the removal.
        """
        event = await self.get_event(event_id)
        user = parse_user_id(user_id)
        (await self._ledger.unregister(event, user)).unwrap()

        await self._notifications.notify(
            [user],
            NotificationKind.REGISTRATION_CANCELLED,
            f"Unregistered: {event.title}",
            f"You have been unregistered from {event.title}.",
            event_id=event.id,
        )
        return self._overview(event, self._classifier.now(), user)

    # -- helpers -----------------------------------------------------------

    def _overview(self, event: Event, now: datetime, viewer: UserId | None) -> EventOverview:
        return EventOverview(
            event=event,
            status=self._classifier.classify(event, now),
            registered_count=self._ledger.count(event),
            available_slots=self._ledger.available_slots(event),
            is_full=self._ledger.is_full(event),
            is_registered=viewer is not None and self._ledger.is_registered(event, viewer),
        )

    async def _read(self, awaitable: Awaitable[T]) -> T:
        """Await a store call, mapping failures other than MissingRowError to RepositoryError."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except MissingRowError:
            raise
        except (StoreError, TimeoutError) as exc:
            logger.error("Store read failed: %r", exc)
            raise RepositoryError(exc) from exc

    async def _write(self, awaitable: Awaitable[T]) -> T:
        """Await a store mutation.

        A mutation the store did not confirm in time, or whose store call was
        cancelled, may still have been applied, so it raises
        UnknownOutcomeError instead of RepositoryError.
        """
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except MissingRowError:
            raise
        except StoreError as exc:
            logger.error("Store write failed: %r", exc)
            raise RepositoryError(exc) from exc
        except TimeoutError as exc:
            logger.warning("Store write timed out, outcome unknown")
            raise UnknownOutcomeError("store call timed out") from exc
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.warning("Store write was cancelled, outcome unknown")
            raise UnknownOutcomeError("store call was cancelled") from None

    async def _refresh_registrations(self, event_ids: Iterable[EventId]) -> None:
        try:
            await self._ledger.refresh_all(event_ids)
        except StoreError as exc:
            raise RepositoryError(exc) from exc

    async def _refresh_registration(self, event_id: EventId) -> None:
        try:
            await self._ledger.refresh(event_id)
        except StoreError as exc:
            raise RepositoryError(exc) from exc

    async def _registrants_for_notice(self, event_id: EventId) -> frozenset[UserId]:
        try:
            return await self._ledger.refresh(event_id)
        except StoreError:
            logger.exception("Could not load registrants of event %s for notification", event_id)
            return frozenset()

    async def _cache_get(self, key: str):
        if self._cache is None:
            return None
        return await self._cache.aget(key)

    async def _cache_set(self, key: str, value) -> None:
        if self._cache is not None:
            await self._cache.aset(key, value, self._cache_timeout)

    async def _invalidate(self, event_id: EventId | None = None) -> None:
        if self._cache is None:
            return
        keys = [EVENT_LIST_KEY]
        if event_id is not None:
            keys.append(event_key(event_id))
        await self._cache.adelete_many(keys)
