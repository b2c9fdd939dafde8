"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models

from campus_events.domain.models import CampusType, EventCategory, NotificationKind


def _choices(enum) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").capitalize()) for member in enum]


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=20, choices=_choices(EventCategory))
    location = models.CharField(max_length=255)
    campus_type = models.CharField(max_length=3, choices=_choices(CampusType))
    organizer = models.CharField(max_length=255)
    image_url = models.URLField(max_length=500, blank=True, null=True)
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    capacity = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="event_created_at_idx"),
            models.Index(fields=["start_at"], name="event_start_at_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_at__lte=models.F("end_at")),
                name="event_starts_before_it_ends",
            ),
        ]

    def __str__(self) -> str:
        return self.title


class Registration(models.Model):
    """Persistence model for a user's registration to an event."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="registrations"
    )
    user_id = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["user_id"], name="registration_user_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user_id"], name="one_registration_per_user"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.event_id}"


class Notification(models.Model):
    """Persistence model for user notifications."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient_id = models.CharField(max_length=255)
    kind = models.CharField(max_length=32, choices=_choices(NotificationKind))
    title = models.CharField(max_length=255)
    message = models.TextField()
    # Plain column: cancellation notices outlive the event they mention.
    event_id = models.UUIDField(blank=True, null=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient_id", "-created_at"], name="notification_recipient_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} - {self.recipient_id}"
