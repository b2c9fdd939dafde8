"""Unit tests for event status classification.

Run with: pytest tests/test_status.py -v
"""

import uuid
from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone

import pytest

from campus_events.domain import (
    Capacity,
    Event,
    EventId,
    EventStatus,
    EventStatusClassifier,
    classify,
)
from campus_events.domain.errors import ValidationError

START = datetime(2025, 1, 1, 10, 0, tzinfo=UTC)
END = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def event(make_draft) -> Event:
    draft = make_draft(start_at=START, end_at=END, capacity=Capacity(10))
    return Event(id=EventId(uuid.uuid4()), created_at=START, updated_at=START, **vars(draft))


class TestClassify:
    """Tests for classify(event, now)."""

    @pytest.mark.parametrize(
        ("now", "expected"),
        [
            (datetime(2025, 1, 1, 9, 59, tzinfo=UTC), EventStatus.UPCOMING),
            (datetime(2025, 1, 1, 10, 0, tzinfo=UTC), EventStatus.ONGOING),
            (datetime(2025, 1, 1, 12, 0, tzinfo=UTC), EventStatus.ONGOING),
            (datetime(2025, 1, 1, 12, 1, tzinfo=UTC), EventStatus.PAST),
        ],
    )
    def test_boundaries_are_ongoing(self, event, now, expected):
        assert classify(event, now) is expected

    def test_zero_length_event_is_ongoing_at_its_instant(self, event):
        instant = replace(event, end_at=START)
        assert classify(instant, START) is EventStatus.ONGOING
        assert classify(instant, START + timedelta(microseconds=1)) is EventStatus.PAST

    def test_other_timezones_compare_as_instants(self, event):
        """11:00 in UTC+1 is 10:00 UTC, the start instant."""
        now = datetime(2025, 1, 1, 11, 0, tzinfo=timezone(timedelta(hours=1)))
        assert classify(event, now) is EventStatus.ONGOING

    def test_end_before_start_is_rejected(self, event):
        broken = replace(event, start_at=END, end_at=START)
        with pytest.raises(ValidationError):
            classify(broken, START)

    def test_naive_now_is_rejected(self, event):
        with pytest.raises(ValidationError):
            classify(event, datetime(2025, 1, 1, 11, 0))

    def test_naive_event_times_are_rejected(self, event):
        naive = replace(event, start_at=START.replace(tzinfo=None))
        with pytest.raises(ValidationError):
            classify(naive, START)

    def test_classification_is_recomputed(self, event, clock):
        classifier = EventStatusClassifier(clock)
        clock.now = START - timedelta(minutes=1)
        assert classifier.classify(event) is EventStatus.UPCOMING
        clock.advance(timedelta(hours=3))
        assert classifier.classify(event) is EventStatus.PAST

    def test_explicit_now_overrides_clock(self, event, clock):
        classifier = EventStatusClassifier(clock)
        assert classifier.classify(event, now=END) is EventStatus.ONGOING
