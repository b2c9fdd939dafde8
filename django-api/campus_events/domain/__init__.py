from campus_events.domain.models import (
    CampusType,
    CatalogSummary,
    Event,
    EventCategory,
    EventDraft,
    EventOverview,
    EventStatus,
    Notification,
    NotificationKind,
)
from campus_events.domain.results import Err, Ok, RegistrationResult, Unknown
from campus_events.domain.status import EventStatusClassifier, classify
from campus_events.domain.value_objects import Capacity, EventId, NotificationId, UserId

__all__ = [
    "Event",
    "EventDraft",
    "EventOverview",
    "EventCategory",
    "EventStatus",
    "CampusType",
    "CatalogSummary",
    "Notification",
    "NotificationKind",
    "EventId",
    "NotificationId",
    "UserId",
    "Capacity",
    "Ok",
    "Err",
    "Unknown",
    "RegistrationResult",
    "EventStatusClassifier",
    "classify",
]
