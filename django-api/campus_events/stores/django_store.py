"""Django ORM implementation of the stores.

ORM access is synchronous, so each operation runs in a thread-sensitive
``sync_to_async`` wrapper and database failures surface as StoreError.
"""

import logging
from collections import defaultdict

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, transaction

from campus_events import models
from campus_events.domain import (
    CampusType,
    Capacity,
    Event,
    EventCategory,
    EventDraft,
    EventId,
    Notification,
    NotificationId,
    NotificationKind,
    UserId,
)
from campus_events.stores.errors import (
    CapacityExceededError,
    DuplicateKeyError,
    MissingRowError,
    StoreError,
)
from campus_events.stores.interfaces import EventStore, NotificationStore

logger = logging.getLogger(__name__)


async def _run(func, *args):
    try:
        return await sync_to_async(func)(*args)
    except DatabaseError as exc:
        logger.warning("Database operation %s failed: %s", func.__name__, exc)
        raise StoreError(str(exc)) from exc


def _event_to_domain(record: models.Event) -> Event:
    return Event(
        id=EventId(record.id),
        title=record.title,
        description=record.description,
        category=EventCategory(record.category),
        location=record.location,
        campus_type=CampusType(record.campus_type),
        organizer=record.organizer,
        image_url=record.image_url or None,
        start_at=record.start_at,
        end_at=record.end_at,
        capacity=Capacity(record.capacity),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _event_columns(draft: EventDraft) -> dict:
    return {
        "title": draft.title,
        "description": draft.description,
        "category": draft.category.value,
        "location": draft.location,
        "campus_type": draft.campus_type.value,
        "organizer": draft.organizer,
        "image_url": draft.image_url,
        "start_at": draft.start_at,
        "end_at": draft.end_at,
        "capacity": draft.capacity.value,
    }


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    async def list_events(self) -> list[Event]:
        return await _run(self._list_events)

    def _list_events(self) -> list[Event]:
        return [_event_to_domain(record) for record in models.Event.objects.all()]

    async def get_event(self, event_id: EventId) -> Event | None:
        return await _run(self._get_event, event_id)

    def _get_event(self, event_id: EventId) -> Event | None:
        record = models.Event.objects.filter(pk=event_id.value).first()
        return _event_to_domain(record) if record is not None else None

    async def event_exists(self, event_id: EventId) -> bool:
        return await _run(self._event_exists, event_id)

    def _event_exists(self, event_id: EventId) -> bool:
        return models.Event.objects.filter(pk=event_id.value).exists()

    async def create_event(self, draft: EventDraft) -> Event:
        return await _run(self._create_event, draft)

    def _create_event(self, draft: EventDraft) -> Event:
        record = models.Event.objects.create(**_event_columns(draft))
        return _event_to_domain(record)

    async def update_event(self, event_id: EventId, draft: EventDraft) -> Event:
        return await _run(self._update_event, event_id, draft)

    def _update_event(self, event_id: EventId, draft: EventDraft) -> Event:
        with transaction.atomic():
            record = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
            if record is None:
                raise MissingRowError(str(event_id))
            for column, value in _event_columns(draft).items():
                setattr(record, column, value)
            # save() rather than update() so auto_now and post_save still fire
            record.save()
        return _event_to_domain(record)

    async def delete_event(self, event_id: EventId) -> frozenset[UserId]:
        return await _run(self._delete_event, event_id)

    def _delete_event(self, event_id: EventId) -> frozenset[UserId]:
        with transaction.atomic():
            # Same row lock as _insert_registration, so no registration can
            # land between reading the registrants and the cascade.
            event = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
            if event is None:
                raise MissingRowError(str(event_id))
            user_ids = list(event.registrations.values_list("user_id", flat=True))
            event.delete()
        return frozenset(UserId(user_id) for user_id in user_ids)

    async def fetch_registrations(self, event_id: EventId) -> frozenset[UserId]:
        return await _run(self._fetch_registrations, event_id)

    def _fetch_registrations(self, event_id: EventId) -> frozenset[UserId]:
        user_ids = models.Registration.objects.filter(event_id=event_id.value).values_list(
            "user_id", flat=True
        )
        return frozenset(UserId(user_id) for user_id in user_ids)

    async def fetch_all_registrations(self) -> dict[EventId, frozenset[UserId]]:
        return await _run(self._fetch_all_registrations)

    def _fetch_all_registrations(self) -> dict[EventId, frozenset[UserId]]:
        grouped: dict[EventId, set[UserId]] = defaultdict(set)
        for event_id, user_id in models.Registration.objects.values_list("event_id", "user_id"):
            grouped[EventId(event_id)].add(UserId(user_id))
        return {event_id: frozenset(users) for event_id, users in grouped.items()}

    async def fetch_user_registrations(self, user_id: UserId) -> frozenset[EventId]:
        return await _run(self._fetch_user_registrations, user_id)

    def _fetch_user_registrations(self, user_id: UserId) -> frozenset[EventId]:
        event_ids = models.Registration.objects.filter(user_id=user_id.value).values_list(
            "event_id", flat=True
        )
        return frozenset(EventId(event_id) for event_id in event_ids)

    async def insert_registration(self, event_id: EventId, user_id: UserId) -> None:
        await _run(self._insert_registration, event_id, user_id)

    def _insert_registration(self, event_id: EventId, user_id: UserId) -> None:
        with transaction.atomic():
            # The row lock serializes concurrent inserts for one event, so the
            # count below cannot be overtaken before our insert commits.
            event = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
            if event is None:
                raise MissingRowError(str(event_id))

            registrations = models.Registration.objects.filter(event=event)
            if registrations.filter(user_id=user_id.value).exists():
                raise DuplicateKeyError(f"{event_id}/{user_id}")
            if registrations.count() >= event.capacity:
                raise CapacityExceededError(str(event_id))

            try:
                with transaction.atomic():
                    models.Registration.objects.create(event=event, user_id=user_id.value)
            except IntegrityError as exc:
                raise DuplicateKeyError(f"{event_id}/{user_id}") from exc

    async def delete_registration(self, event_id: EventId, user_id: UserId) -> None:
        await _run(self._delete_registration, event_id, user_id)

    def _delete_registration(self, event_id: EventId, user_id: UserId) -> None:
        deleted, _ = models.Registration.objects.filter(
            event_id=event_id.value, user_id=user_id.value
        ).delete()
        if not deleted:
            raise MissingRowError(f"{event_id}/{user_id}")


def _notification_to_domain(record: models.Notification) -> Notification:
    return Notification(
        id=NotificationId(record.id),
        recipient_id=UserId(record.recipient_id),
        kind=NotificationKind(record.kind),
        title=record.title,
        message=record.message,
        event_id=EventId(record.event_id) if record.event_id else None,
        is_read=record.is_read,
        created_at=record.created_at,
    )


class DjangoNotificationStore(NotificationStore):
    """Notification store using Django ORM."""

    async def add(
        self,
        recipient_id: UserId,
        kind: NotificationKind,
        title: str,
        message: str,
        event_id: EventId | None = None,
    ) -> Notification:
        return await _run(self._add, recipient_id, kind, title, message, event_id)

    def _add(
        self,
        recipient_id: UserId,
        kind: NotificationKind,
        title: str,
        message: str,
        event_id: EventId | None,
    ) -> Notification:
        record = models.Notification.objects.create(
            recipient_id=recipient_id.value,
            kind=kind.value,
            title=title,
            message=message,
            event_id=event_id.value if event_id else None,
        )
        return _notification_to_domain(record)

    async def list_for_user(self, recipient_id: UserId) -> list[Notification]:
        return await _run(self._list_for_user, recipient_id)

    def _list_for_user(self, recipient_id: UserId) -> list[Notification]:
        records = models.Notification.objects.filter(recipient_id=recipient_id.value)
        return [_notification_to_domain(record) for record in records]

    async def mark_read(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        return await _run(self._mark_read, recipient_id, notification_id)

    def _mark_read(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        owned = models.Notification.objects.filter(
            pk=notification_id.value, recipient_id=recipient_id.value
        )
        if not owned.exists():
            return False
        owned.filter(is_read=False).update(is_read=True)
        return True

    async def mark_all_read(self, recipient_id: UserId) -> int:
        return await _run(self._mark_all_read, recipient_id)

    def _mark_all_read(self, recipient_id: UserId) -> int:
        return models.Notification.objects.filter(
            recipient_id=recipient_id.value, is_read=False
        ).update(is_read=True)

    async def delete(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        return await _run(self._delete, recipient_id, notification_id)

    def _delete(self, recipient_id: UserId, notification_id: NotificationId) -> bool:
        deleted, _ = models.Notification.objects.filter(
            pk=notification_id.value, recipient_id=recipient_id.value
        ).delete()
        return bool(deleted)
