"""Catalog filtering and grouping over event overviews."""

from collections.abc import Iterable

from campus_events.domain.models import EventCategory, EventOverview, EventStatus


def matches(
    overview: EventOverview,
    *,
    search: str = "",
    category: EventCategory | None = None,
    status: EventStatus | None = None,
) -> bool:
    """Search is a case-insensitive substring match on title or description."""
    event = overview.event
    needle = search.strip().lower()
    if needle and needle not in event.title.lower() and needle not in event.description.lower():
        return False
    if category is not None and event.category != category:
        return False
    if status is not None and overview.status != status:
        return False
    return True


def group_by_status(
    overviews: Iterable[EventOverview],
) -> dict[EventStatus, list[EventOverview]]:
    """Split overviews by status, each group in display order.

    Upcoming events soonest first, ongoing events ending soonest first,
    past events most recent first.
    """
    groups: dict[EventStatus, list[EventOverview]] = {status: [] for status in EventStatus}
    for overview in overviews:
        groups[overview.status].append(overview)

    groups[EventStatus.UPCOMING].sort(key=lambda o: o.event.start_at)
    groups[EventStatus.ONGOING].sort(key=lambda o: o.event.end_at)
    groups[EventStatus.PAST].sort(key=lambda o: o.event.start_at, reverse=True)
    return groups
