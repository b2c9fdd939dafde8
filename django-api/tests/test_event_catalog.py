"""Integration tests for the event catalog and registration API.

Run with: pytest tests/test_event_catalog.py -v
"""

import uuid
from datetime import timedelta

import pytest
from django.db import DatabaseError
from django.utils import timezone
from rest_framework.test import APIClient

from campus_events import models
from campus_events.stores.django_store import DjangoEventStore


def create_event(**overrides) -> models.Event:
    start = timezone.now() + timedelta(days=1)
    values = {
        "title": "Spring Hackathon",
        "description": "Build something in 24 hours.",
        "category": "academic",
        "location": "Library Commons",
        "campus_type": "on",
        "organizer": "CS Society",
        "start_at": start,
        "end_at": start + timedelta(hours=24),
        "capacity": 2,
    }
    values.update(overrides)
    return models.Event.objects.create(**values)


def payload(**overrides) -> dict:
    start = timezone.now() + timedelta(days=3)
    values = {
        "title": "Open Mic",
        "description": "Bring an instrument.",
        "category": "arts",
        "location": "Cafe Stage",
        "campus_type": "on",
        "organizer": "Music Club",
        "start_at": start.isoformat(),
        "end_at": (start + timedelta(hours=2)).isoformat(),
        "capacity": 40,
    }
    values.update(overrides)
    return values


@pytest.mark.django_db
class TestEventList:
    """Tests for GET /api/events"""

    def test_list_events_empty_catalog(self, api_client: APIClient):
        response = api_client.get("/api/events")

        assert response.status_code == 200
        assert response.json() == []

    def test_list_events_with_derived_state(self, api_client: APIClient):
        event = create_event()
        models.Registration.objects.create(event=event, user_id="someone")

        [item] = api_client.get("/api/events").json()

        assert item["id"] == str(event.id)
        assert item["status"] == "upcoming"
        assert item["registered_count"] == 1
        assert item["available_slots"] == 1
        assert item["is_full"] is False
        assert item["is_registered"] is False

    def test_filters(self, api_client: APIClient):
        create_event(title="Hackathon")
        now = timezone.now()
        create_event(
            title="Pickup Soccer",
            category="sports",
            start_at=now - timedelta(hours=1),
            end_at=now + timedelta(hours=1),
        )

        by_status = api_client.get("/api/events", {"status": "ongoing"}).json()
        by_category = api_client.get("/api/events", {"category": "academic"}).json()
        by_search = api_client.get("/api/events", {"search": "SOCCER"}).json()

        assert [e["title"] for e in by_status] == ["Pickup Soccer"]
        assert [e["title"] for e in by_category] == ["Hackathon"]
        assert [e["title"] for e in by_search] == ["Pickup Soccer"]

    def test_unknown_filter_value_is_rejected(self, api_client: APIClient):
        response = api_client.get("/api/events", {"status": "cancelled"})

        assert response.status_code == 400

    def test_store_failure_is_service_unavailable(self, api_client: APIClient, monkeypatch):
        def broken(self):
            raise DatabaseError("could not connect to server")

        monkeypatch.setattr(DjangoEventStore, "_list_events", broken)

        response = api_client.get("/api/events")

        assert response.status_code == 503
        assert response.json()["code"] == "REPOSITORY_ERROR"
        assert "could not connect" not in response.json()["message"]


@pytest.mark.django_db
class TestEventDetail:
    """Tests for GET /api/events/{id}"""

    def test_get_event_returns_details(self, api_client: APIClient):
        event = create_event()

        response = api_client.get(f"/api/events/{event.id}")

        assert response.status_code == 200
        assert response.json()["title"] == "Spring Hackathon"
        assert response.json()["capacity"] == 2

    def test_get_event_not_found(self, api_client: APIClient):
        response = api_client.get(f"/api/events/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "EVENT_NOT_FOUND"

    def test_get_event_invalid_id_format(self, api_client: APIClient):
        response = api_client.get("/api/events/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_EVENT_ID"


@pytest.mark.django_db
class TestEventAdministration:
    """Tests for administrator writes on /api/events"""

    def test_create_event(self, organizer_client: APIClient):
        response = organizer_client.post("/api/events", payload(), format="json")

        assert response.status_code == 201
        assert response.json()["title"] == "Open Mic"
        assert models.Event.objects.filter(pk=response.json()["id"]).exists()

    def test_create_requires_admin(self, member_client: APIClient):
        response = member_client.post("/api/events", payload(), format="json")

        assert response.status_code == 403

    def test_create_anonymous_is_refused(self, api_client: APIClient):
        response = api_client.post("/api/events", payload(), format="json")

        assert response.status_code in (401, 403)

    def test_create_rejects_end_before_start(self, organizer_client: APIClient):
        body = payload()
        body["end_at"], body["start_at"] = body["start_at"], body["end_at"]

        response = organizer_client.post("/api/events", body, format="json")

        assert response.status_code == 400
        assert not models.Event.objects.exists()

    def test_create_rejects_negative_capacity(self, organizer_client: APIClient):
        response = organizer_client.post("/api/events", payload(capacity=-5), format="json")

        assert response.status_code == 400

    def test_patch_updates_only_given_fields(self, organizer_client: APIClient):
        event = create_event()

        response = organizer_client.patch(
            f"/api/events/{event.id}", {"location": "Gym"}, format="json"
        )

        assert response.status_code == 200
        event.refresh_from_db()
        assert event.location == "Gym"
        assert event.title == "Spring Hackathon"

    def test_patch_rejects_window_inversion(self, organizer_client: APIClient):
        event = create_event()

        response = organizer_client.patch(
            f"/api/events/{event.id}",
            {"end_at": (event.start_at - timedelta(hours=1)).isoformat()},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_delete_event_cascades(self, organizer_client: APIClient):
        event = create_event()
        models.Registration.objects.create(event=event, user_id="someone")

        response = organizer_client.delete(f"/api/events/{event.id}")

        assert response.status_code == 204
        assert not models.Registration.objects.exists()
        assert organizer_client.get(f"/api/events/{event.id}").status_code == 404

    def test_summary(self, organizer_client: APIClient, member_client: APIClient):
        event = create_event()
        models.Registration.objects.create(event=event, user_id="someone")

        response = organizer_client.get("/api/admin/summary")

        assert response.json() == {
            "total_events": 1,
            "upcoming": 1,
            "ongoing": 0,
            "past": 0,
            "total_registrations": 1,
        }
        assert member_client.get("/api/admin/summary").status_code == 403


@pytest.mark.django_db
class TestRegistration:
    """Tests for POST/DELETE /api/events/{id}/registration"""

    def test_register(self, member_client: APIClient, member):
        event = create_event()

        response = member_client.post(f"/api/events/{event.id}/registration")

        assert response.status_code == 201
        assert response.json()["registered_count"] == 1
        assert response.json()["is_registered"] is True
        assert models.Registration.objects.filter(event=event, user_id=str(member.pk)).exists()

    def test_register_twice_conflicts(self, member_client: APIClient):
        event = create_event()
        member_client.post(f"/api/events/{event.id}/registration")

        response = member_client.post(f"/api/events/{event.id}/registration")

        assert response.status_code == 409
        assert response.json()["code"] == "ALREADY_REGISTERED"

    def test_register_full_event_conflicts(self, member_client: APIClient):
        event = create_event(capacity=1)
        models.Registration.objects.create(event=event, user_id="someone")

        response = member_client.post(f"/api/events/{event.id}/registration")

        assert response.status_code == 409
        assert response.json()["code"] == "AT_CAPACITY"

    def test_unregister(self, member_client: APIClient):
        event = create_event()
        member_client.post(f"/api/events/{event.id}/registration")

        response = member_client.delete(f"/api/events/{event.id}/registration")

        assert response.status_code == 200
        assert response.json()["registered_count"] == 0
        assert not models.Registration.objects.exists()

    def test_unregister_when_not_registered_conflicts(self, member_client: APIClient):
        event = create_event()

        response = member_client.delete(f"/api/events/{event.id}/registration")

        assert response.status_code == 409
        assert response.json()["code"] == "NOT_REGISTERED"

    def test_register_requires_login(self, api_client: APIClient):
        event = create_event()

        response = api_client.post(f"/api/events/{event.id}/registration")

        assert response.status_code in (401, 403)

    def test_catalog_marks_own_registration(self, member_client: APIClient):
        event = create_event()
        member_client.post(f"/api/events/{event.id}/registration")

        [item] = member_client.get("/api/events").json()

        assert item["is_registered"] is True

    def test_my_registrations_grouped_by_status(self, member_client: APIClient):
        now = timezone.now()
        upcoming = create_event(title="Upcoming")
        past = create_event(
            title="Past", start_at=now - timedelta(days=2), end_at=now - timedelta(days=1)
        )
        create_event(title="Someone else's")
        for event in (upcoming, past):
            member_client.post(f"/api/events/{event.id}/registration")

        body = member_client.get("/api/me/registrations").json()

        assert [e["title"] for e in body["upcoming"]] == ["Upcoming"]
        assert body["ongoing"] == []
        assert [e["title"] for e in body["past"]] == ["Past"]
