"""Cache keys for the event catalog.

Only event records are cached. Statuses and registration counts are derived
per request and never stored.
"""

from django.core.cache import cache

EVENT_LIST_KEY = "events:list"


def event_key(event_id) -> str:
    return f"events:{event_id}"


def invalidate_event(event_id) -> None:
    cache.delete_many([EVENT_LIST_KEY, event_key(event_id)])
