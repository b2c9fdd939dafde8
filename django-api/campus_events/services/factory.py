"""Wiring of services from Django settings."""

from functools import cache

from django.core.cache import cache as django_cache
from django.utils.module_loading import import_string

from campus_events.conf import get_setting
from campus_events.services.event_service import EventService
from campus_events.services.notification_service import NotificationService


@cache
def _load_store(dotted_path: str):
    # One instance per process; the in-memory stores hold their data on it.
    return import_string(dotted_path)()


def build_notification_service() -> NotificationService:
    return NotificationService(_load_store(get_setting("NOTIFICATION_STORE")))


def build_event_service() -> EventService:
    return EventService(
        _load_store(get_setting("EVENT_STORE")),
        build_notification_service(),
        timeout=get_setting("STORE_TIMEOUT"),
        cache=django_cache,
        cache_timeout=get_setting("CATALOG_CACHE_TIMEOUT"),
    )
