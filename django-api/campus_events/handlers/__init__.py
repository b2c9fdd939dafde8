from campus_events.handlers.views import (
    CatalogSummaryView,
    EventDetailView,
    EventListView,
    EventRegistrationView,
    MyRegistrationsView,
    NotificationDetailView,
    NotificationListView,
    NotificationReadAllView,
    NotificationReadView,
)

__all__ = [
    "CatalogSummaryView",
    "EventDetailView",
    "EventListView",
    "EventRegistrationView",
    "MyRegistrationsView",
    "NotificationDetailView",
    "NotificationListView",
    "NotificationReadAllView",
    "NotificationReadView",
]
