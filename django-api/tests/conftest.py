"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from rest_framework.test import APIClient

from campus_events.domain import CampusType, Capacity, EventCategory, EventDraft
from campus_events.services import EventService, NotificationService
from campus_events.stores.memory_store import InMemoryEventStore, InMemoryNotificationStore

NOW = datetime(2025, 3, 14, 9, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock for deterministic status classification."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_draft():
    """Build an EventDraft starting one hour after NOW, overridable per field."""

    def factory(**overrides) -> EventDraft:
        values = {
            "title": "Robotics Club Kickoff",
            "description": "Meet the team and see this year's builds.",
            "category": EventCategory.ACADEMIC,
            "location": "Engineering Hall 101",
            "campus_type": CampusType.ON,
            "organizer": "Robotics Club",
            "image_url": None,
            "start_at": NOW + timedelta(hours=1),
            "end_at": NOW + timedelta(hours=3),
            "capacity": Capacity(2),
        }
        values.update(overrides)
        return EventDraft(**values)

    return factory


@pytest.fixture
def event_store(clock) -> InMemoryEventStore:
    return InMemoryEventStore(clock)


@pytest.fixture
def notification_store(clock) -> InMemoryNotificationStore:
    return InMemoryNotificationStore(clock)


@pytest.fixture
def notification_service(notification_store) -> NotificationService:
    return NotificationService(notification_store)


@pytest.fixture
def event_service(event_store, notification_service, clock) -> EventService:
    return EventService(event_store, notification_service, clock=clock)


@pytest.fixture
def member(django_user_model):
    return django_user_model.objects.create_user(username="ada", password="pw")


@pytest.fixture
def organizer(django_user_model):
    return django_user_model.objects.create_user(
        username="grace", password="pw", is_staff=True
    )


@pytest.fixture
def member_client(api_client, member) -> APIClient:
    api_client.force_authenticate(user=member)
    return api_client


@pytest.fixture
def organizer_client(organizer) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=organizer)
    return client
