"""Serializers for validating API input and rendering domain models."""

from rest_framework import serializers

from campus_events.domain import CampusType, EventCategory, EventStatus, NotificationKind


def _enum_choices(enum) -> list[str]:
    return [member.value for member in enum]


class EventSerializer(serializers.Serializer):
    """Serializer for EventOverview domain model."""

    id = serializers.UUIDField(source="event.id.value")
    title = serializers.CharField(source="event.title")
    description = serializers.CharField(source="event.description")
    category = serializers.CharField(source="event.category.value")
    location = serializers.CharField(source="event.location")
    campus_type = serializers.CharField(source="event.campus_type.value")
    organizer = serializers.CharField(source="event.organizer")
    image_url = serializers.CharField(source="event.image_url", allow_null=True)
    start_at = serializers.DateTimeField(source="event.start_at")
    end_at = serializers.DateTimeField(source="event.end_at")
    capacity = serializers.IntegerField(source="event.capacity.value")
    status = serializers.CharField(source="status.value")
    registered_count = serializers.IntegerField()
    available_slots = serializers.IntegerField()
    is_full = serializers.BooleanField()
    is_registered = serializers.BooleanField()


class EventRecordSerializer(serializers.Serializer):
    """Serializer for a bare Event domain model, as returned by admin writes."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    category = serializers.CharField(source="category.value")
    location = serializers.CharField()
    campus_type = serializers.CharField(source="campus_type.value")
    organizer = serializers.CharField()
    image_url = serializers.CharField(allow_null=True)
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    capacity = serializers.IntegerField(source="capacity.value")
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class EventInputSerializer(serializers.Serializer):
    """Validates administrator input for creating or editing an event."""

    title = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    category = serializers.ChoiceField(choices=_enum_choices(EventCategory))
    location = serializers.CharField(max_length=255)
    campus_type = serializers.ChoiceField(choices=_enum_choices(CampusType))
    organizer = serializers.CharField(max_length=255)
    image_url = serializers.URLField(
        max_length=500, allow_blank=True, allow_null=True, required=False, default=None
    )
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    capacity = serializers.IntegerField(min_value=0)

    def validate(self, attrs):
        start_at = attrs.get("start_at")
        end_at = attrs.get("end_at")
        if start_at is not None and end_at is not None and start_at > end_at:
            raise serializers.ValidationError({"end_at": "End time must not be before start time."})
        return attrs


class EventQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default="")
    category = serializers.ChoiceField(choices=_enum_choices(EventCategory), required=False)
    status = serializers.ChoiceField(choices=_enum_choices(EventStatus), required=False)

    def validate_category(self, value: str) -> EventCategory:
        return EventCategory(value)

    def validate_status(self, value: str) -> EventStatus:
        return EventStatus(value)


class DashboardSerializer(serializers.Serializer):
    upcoming = EventSerializer(many=True)
    ongoing = EventSerializer(many=True)
    past = EventSerializer(many=True)


class CatalogSummarySerializer(serializers.Serializer):
    total_events = serializers.IntegerField()
    upcoming = serializers.IntegerField()
    ongoing = serializers.IntegerField()
    past = serializers.IntegerField()
    total_registrations = serializers.IntegerField()


class NotificationSerializer(serializers.Serializer):
    """Serializer for Notification domain model."""

    id = serializers.UUIDField(source="id.value")
    kind = serializers.ChoiceField(choices=_enum_choices(NotificationKind), source="kind.value")
    title = serializers.CharField()
    message = serializers.CharField()
    event_id = serializers.SerializerMethodField()
    is_read = serializers.BooleanField()
    created_at = serializers.DateTimeField()

    def get_event_id(self, obj) -> str | None:
        return str(obj.event_id) if obj.event_id is not None else None
