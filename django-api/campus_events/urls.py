from django.urls import path

from campus_events.handlers import (
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

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/registration",
        EventRegistrationView.as_view(),
        name="event-registration",
    ),
    path("me/registrations", MyRegistrationsView.as_view(), name="my-registrations"),
    path("admin/summary", CatalogSummaryView.as_view(), name="catalog-summary"),
    path("notifications", NotificationListView.as_view(), name="notification-list"),
    path(
        "notifications/read-all",
        NotificationReadAllView.as_view(),
        name="notification-read-all",
    ),
    path(
        "notifications/<str:notification_id>/read",
        NotificationReadView.as_view(),
        name="notification-read",
    ),
    path(
        "notifications/<str:notification_id>",
        NotificationDetailView.as_view(),
        name="notification-detail",
    ),
]
