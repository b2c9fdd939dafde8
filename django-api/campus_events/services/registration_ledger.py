"""Registration ledger: who is registered for which event.

The ledger keeps an in-memory mirror of each event's registrant set for fast
availability answers. The store stays the source of truth:

- register/unregister re-check the mirror, then ask the store to apply the
  change as one conditional operation;
- the mirror changes only after the store confirms;
- any rejection or failure from the store drops or re-fetches the mirror
  entry instead of guessing.

Results are returned as values (Ok / Err / Unknown), never raised. The ledger
does not retry.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TypeVar

from campus_events.domain import Err, Event, EventId, Ok, RegistrationResult, Unknown, UserId
from campus_events.domain.errors import (
    AlreadyRegisteredError,
    AtCapacityError,
    EventNotFoundError,
    NotRegisteredError,
    RepositoryError,
)
from campus_events.stores.errors import (
    CapacityExceededError,
    DuplicateKeyError,
    MissingRowError,
    StoreError,
)
from campus_events.stores.interfaces import EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Unconfirmed(Exception):
    """The store call ended before it confirmed or rejected the operation."""


class RegistrationLedger:
    """Per-event registrant sets with capacity and uniqueness guarantees."""

    def __init__(self, store: EventStore, *, timeout: float | None = None) -> None:
        self._store = store
        self._timeout = timeout
        self._members: dict[EventId, set[UserId]] = {}
        self._locks: defaultdict[EventId, asyncio.Lock] = defaultdict(asyncio.Lock)

    # -- mirror management -------------------------------------------------

    def load(self, registrations: Mapping[EventId, Iterable[UserId]]) -> None:
        """Seed the mirror from registrations already fetched by the caller."""
        for event_id, user_ids in registrations.items():
            self._members[event_id] = set(user_ids)

    def forget(self, event_id: EventId) -> None:
        """Drop the mirror entry so the next use re-fetches it."""
        self._members.pop(event_id, None)

    def is_tracked(self, event_id: EventId) -> bool:
        return event_id in self._members

    async def refresh(self, event_id: EventId) -> frozenset[UserId]:
        """Re-fetch one event's registrants from the store.

        Raises:
            StoreError: If the store call fails or does not answer in time.
        """
        user_ids = await self._fetch(self._store.fetch_registrations(event_id))
        self._members[event_id] = set(user_ids)
        return frozenset(user_ids)

    async def refresh_all(self, event_ids: Iterable[EventId] = ()) -> None:
        """Re-fetch every event's registrants in one store call.

        Tracked events and events listed in ``event_ids`` that are absent from
        the store's answer have no registrants.

        Raises:
            StoreError: If the store call fails or does not answer in time.
        """
        registrations = await self._fetch(self._store.fetch_all_registrations())
        for event_id in {*self._members, *event_ids}:
            self._members[event_id] = set()
        self.load(registrations)

    def registrants(self, event: Event) -> frozenset[UserId]:
        """Return the mirrored registrants of ``event``.

        Raises:
            LookupError: If the event's registrations have not been loaded.
        """
        try:
            return frozenset(self._members[event.id])
        except KeyError:
            raise LookupError(f"Registrations for event {event.id} are not loaded") from None

    # -- queries -----------------------------------------------------------

    def count(self, event: Event) -> int:
        return len(self.registrants(event))

    def available_slots(self, event: Event) -> int:
        return max(0, event.capacity.value - self.count(event))

    def is_full(self, event: Event) -> bool:
        return self.available_slots(event) == 0

    def is_registered(self, event: Event, user_id: UserId) -> bool:
        return user_id in self.registrants(event)

    def can_register(self, event: Event, user_id: UserId) -> RegistrationResult:
        """Advisory pre-check against the mirror.

        An existing registrant is reported as already registered even when the
        event is full.
        """
        members = self.registrants(event)
        if user_id in members:
            return Err(AlreadyRegisteredError(str(event.id), str(user_id)))
        if len(members) >= event.capacity.value:
            return Err(AtCapacityError(str(event.id)))
        return Ok(len(members))

    # -- mutations ---------------------------------------------------------

    async def register(self, event: Event, user_id: UserId) -> RegistrationResult:
        """Register ``user_id`` for ``event``.

        Returns Ok with the new registration count, Err with the reason for a
        rejection, or Unknown when the store did not confirm in time.
        """
        async with self._locks[event.id]:
            failure = await self._ensure_tracked(event.id)
            if failure is not None:
                return failure

            verdict = self.can_register(event, user_id)
            if isinstance(verdict, Err):
                return verdict

            try:
                await self._confirm(self._store.insert_registration(event.id, user_id))
            except DuplicateKeyError:
                await self._reconcile(event.id)
                return Err(AlreadyRegisteredError(str(event.id), str(user_id)))
            except CapacityExceededError:
                await self._reconcile(event.id)
                return Err(AtCapacityError(str(event.id)))
            except MissingRowError:
                self.forget(event.id)
                return Err(EventNotFoundError(str(event.id)))
            except StoreError as exc:
                return self._store_failure(event.id, exc)
            except _Unconfirmed as exc:
                return self._unconfirmed(event.id, "register", exc)

            return await self._apply(event.id, lambda members: members.add(user_id))

    async def unregister(self, event: Event, user_id: UserId) -> RegistrationResult:
        """Remove ``user_id`` from ``event``.

        A user who is not registered gets Err(NotRegistered) rather than a
        silent success.
        """
        async with self._locks[event.id]:
            failure = await self._ensure_tracked(event.id)
            if failure is not None:
                return failure

            if user_id not in self._members[event.id]:
                return Err(NotRegisteredError(str(event.id), str(user_id)))

            try:
                await self._confirm(self._store.delete_registration(event.id, user_id))
            except MissingRowError:
                await self._reconcile(event.id)
                return Err(NotRegisteredError(str(event.id), str(user_id)))
            except StoreError as exc:
                return self._store_failure(event.id, exc)
            except _Unconfirmed as exc:
                return self._unconfirmed(event.id, "unregister", exc)

            return await self._apply(event.id, lambda members: members.discard(user_id))

    # -- helpers -----------------------------------------------------------

    async def _apply(
        self, event_id: EventId, change: Callable[[set[UserId]], None]
    ) -> RegistrationResult:
        """Mirror a change the store has confirmed and return the new count."""
        members = self._members.get(event_id)
        if members is not None:
            change(members)
            return Ok(len(members))
        # Entry was dropped while the store call was in flight; the store
        # already reflects the change, so read the count back from it.
        await self._reconcile(event_id)
        members = self._members.get(event_id)
        if members is None:
            return Unknown("change applied but the registration count could not be re-read")
        return Ok(len(members))

    async def _confirm(self, awaitable: Awaitable[T]) -> T:
        """Await a store call, turning timeout or cancellation of the call into _Unconfirmed.

        Cancellation of the task running the ledger itself propagates.
        """
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except TimeoutError as exc:
            raise _Unconfirmed("store call timed out") from exc
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            raise _Unconfirmed("store call was cancelled") from None

    async def _fetch(self, awaitable: Awaitable[T]) -> T:
        try:
            return await self._confirm(awaitable)
        except _Unconfirmed as exc:
            raise StoreError(str(exc)) from exc

    async def _ensure_tracked(self, event_id: EventId) -> Err | None:
        if event_id in self._members:
            return None
        try:
            await self.refresh(event_id)
        except StoreError as exc:
            return self._store_failure(event_id, exc)
        return None

    async def _reconcile(self, event_id: EventId) -> None:
        """Best-effort re-fetch after the store disagreed with the mirror."""
        try:
            await self.refresh(event_id)
        except StoreError as exc:
            logger.warning("Could not re-fetch registrations for event %s: %s", event_id, exc)
            self.forget(event_id)

    def _store_failure(self, event_id: EventId, exc: StoreError) -> Err:
        logger.error("Store failure for event %s: %s", event_id, exc)
        self.forget(event_id)
        return Err(RepositoryError(exc))

    def _unconfirmed(self, event_id: EventId, operation: str, exc: _Unconfirmed) -> Unknown:
        logger.warning("Outcome of %s for event %s is unknown: %s", operation, event_id, exc)
        self.forget(event_id)
        return Unknown(str(exc))
