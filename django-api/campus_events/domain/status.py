"""Event status derivation.

Status is a pure function of an event's time window and the current instant.
It is recomputed on every call and never stored.
"""

from collections.abc import Callable
from datetime import UTC, datetime

from campus_events.domain.errors import ValidationError
from campus_events.domain.models import Event, EventStatus

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.tzinfo.utcoffset(value) is not None


def ensure_valid_window(start_at: datetime, end_at: datetime) -> None:
    """Reject naive timestamps and windows that end before they start.

    Raises:
        ValidationError: If either bound is naive or start_at > end_at.
    """
    if not (_is_aware(start_at) and _is_aware(end_at)):
        raise ValidationError("Event times must include a timezone")
    if start_at > end_at:
        raise ValidationError("Event cannot end before it starts")


def classify(event: Event, now: datetime) -> EventStatus:
    """Return the status of ``event`` at instant ``now``.

    Both bounds belong to the ongoing window: an event is ongoing at exactly
    its start and at exactly its end.

    Raises:
        ValidationError: If the event window is invalid or ``now`` is naive.
    """
    ensure_valid_window(event.start_at, event.end_at)
    if not _is_aware(now):
        raise ValidationError("Current time must include a timezone")

    if now < event.start_at:
        return EventStatus.UPCOMING
    if now > event.end_at:
        return EventStatus.PAST
    return EventStatus.ONGOING


class EventStatusClassifier:
    """Classifies events against an injected clock."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def classify(self, event: Event, now: datetime | None = None) -> EventStatus:
        return classify(event, self._clock() if now is None else now)
