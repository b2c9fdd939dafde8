"""Django signals for cache invalidation.

Writes that bypass EventService (admin site, shell, data migrations) still
drop the cached event records.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from campus_events.cache import invalidate_event
from campus_events.models import Event


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    invalidate_event(instance.pk)
