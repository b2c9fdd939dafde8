"""App settings, read from the ``CAMPUS_EVENTS`` dict in Django settings."""

from django.conf import settings

DEFAULTS = {
    "EVENT_STORE": "campus_events.stores.django_store.DjangoEventStore",
    "NOTIFICATION_STORE": "campus_events.stores.django_store.DjangoNotificationStore",
    # Seconds to wait for a store call before reporting an unknown outcome.
    "STORE_TIMEOUT": 5.0,
    "CATALOG_CACHE_TIMEOUT": 60,
}


def get_setting(name: str):
    overrides = getattr(settings, "CAMPUS_EVENTS", {})
    return overrides.get(name, DEFAULTS[name])
