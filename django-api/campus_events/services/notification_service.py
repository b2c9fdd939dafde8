"""Notification service - per-user inbox operations."""

import logging
from collections.abc import Iterable

from campus_events.domain import EventId, Notification, NotificationId, NotificationKind, UserId
from campus_events.domain.errors import (
    InvalidNotificationIdError,
    NotificationNotFoundError,
    RepositoryError,
)
from campus_events.stores.errors import StoreError
from campus_events.stores.interfaces import NotificationStore

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for user notifications."""

    def __init__(self, store: NotificationStore) -> None:
        self._store = store

    async def notify(
        self,
        recipients: Iterable[UserId],
        kind: NotificationKind,
        title: str,
        message: str,
        event_id: EventId | None = None,
    ) -> list[Notification]:
        """Deliver one notification per recipient.

        Delivery is a side effect of a mutation that has already happened, so
        store failures are logged and the remaining recipients still get theirs.
        """
        delivered = []
        for recipient in recipients:
            try:
                delivered.append(
                    await self._store.add(recipient, kind, title, message, event_id)
                )
            except StoreError:
                logger.exception("Could not deliver %s notification to %s", kind.value, recipient)
        return delivered

    async def list_for_user(self, user_id: UserId) -> list[Notification]:
        """Return the user's notifications, newest first.

        Raises:
            RepositoryError: If the store fails.
        """
        try:
            return await self._store.list_for_user(user_id)
        except StoreError as exc:
            raise RepositoryError(exc) from exc

    async def mark_read(self, user_id: UserId, notification_id: str) -> None:
        """Mark one notification read.

        Raises:
            InvalidNotificationIdError: If notification_id is not a valid UUID.
            NotificationNotFoundError: If the user has no such notification.
            RepositoryError: If the store fails.
        """
        parsed = self._parse_id(notification_id)
        try:
            found = await self._store.mark_read(user_id, parsed)
        except StoreError as exc:
            raise RepositoryError(exc) from exc
        if not found:
            raise NotificationNotFoundError(notification_id)

    async def mark_all_read(self, user_id: UserId) -> int:
        try:
            return await self._store.mark_all_read(user_id)
        except StoreError as exc:
            raise RepositoryError(exc) from exc

    async def delete(self, user_id: UserId, notification_id: str) -> None:
        """Delete one notification.

        Raises:
            InvalidNotificationIdError: If notification_id is not a valid UUID.
            NotificationNotFoundError: If the user has no such notification.
            RepositoryError: If the store fails.
        """
        parsed = self._parse_id(notification_id)
        try:
            found = await self._store.delete(user_id, parsed)
        except StoreError as exc:
            raise RepositoryError(exc) from exc
        if not found:
            raise NotificationNotFoundError(notification_id)

    @staticmethod
    def _parse_id(notification_id: str) -> NotificationId:
        try:
            return NotificationId.from_string(notification_id)
        except (TypeError, ValueError) as exc:
            raise InvalidNotificationIdError() from exc
