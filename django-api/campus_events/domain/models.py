"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in campus_events/models.py (persistence layer).
"""

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum

from campus_events.domain.value_objects import Capacity, EventId, NotificationId, UserId


class EventCategory(str, Enum):
    ACADEMIC = "academic"
    SOCIAL = "social"
    CAREER = "career"
    SPORTS = "sports"
    ARTS = "arts"
    OTHER = "other"


class CampusType(str, Enum):
    ON = "on"
    OFF = "off"


class EventStatus(str, Enum):
    """Temporal classification of an event. Derived, never stored."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    PAST = "past"


class NotificationKind(str, Enum):
    REGISTRATION_CONFIRMED = "registration_confirmed"
    REGISTRATION_CANCELLED = "registration_cancelled"
    EVENT_UPDATED = "event_updated"
    EVENT_CANCELLED = "event_cancelled"


@dataclass(frozen=True)
class EventDraft:
    """Administrator-editable fields of an Event."""

    title: str
    description: str
    category: EventCategory
    location: str
    campus_type: CampusType
    organizer: str
    image_url: str | None
    start_at: datetime
    end_at: datetime
    capacity: Capacity


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    category: EventCategory
    location: str
    campus_type: CampusType
    organizer: str
    image_url: str | None
    start_at: datetime
    end_at: datetime
    capacity: Capacity
    created_at: datetime
    updated_at: datetime

    def to_draft(self) -> EventDraft:
        return EventDraft(**{f.name: getattr(self, f.name) for f in fields(EventDraft)})


@dataclass(frozen=True)
class EventOverview:
    """An event together with its derived, per-request state."""

    event: Event
    status: EventStatus
    registered_count: int
    available_slots: int
    is_full: bool
    is_registered: bool = False


@dataclass(frozen=True)
class CatalogSummary:
    total_events: int
    upcoming: int
    ongoing: int
    past: int
    total_registrations: int


@dataclass(frozen=True)
class Notification:
    """Domain representation of a user Notification."""

    id: NotificationId
    recipient_id: UserId
    kind: NotificationKind
    title: str
    message: str
    event_id: EventId | None
    is_read: bool
    created_at: datetime
