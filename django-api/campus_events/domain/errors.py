"""Domain error codes for the campus events module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    AT_CAPACITY = "AT_CAPACITY"
    NOT_REGISTERED = "NOT_REGISTERED"
    REPOSITORY_ERROR = "REPOSITORY_ERROR"
    UNKNOWN_OUTCOME = "UNKNOWN_OUTCOME"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    INVALID_NOTIFICATION_ID = "INVALID_NOTIFICATION_ID"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class ValidationError(DomainError):
    """Raised when event data breaks a domain invariant."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)


class AlreadyRegisteredError(DomainError):
    def __init__(self, event_id: str, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="You are already registered for this event",
        )
        self.event_id = event_id
        self.user_id = user_id


class AtCapacityError(DomainError):
    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.AT_CAPACITY,
            message="This event has reached capacity",
        )
        self.event_id = event_id


class NotRegisteredError(DomainError):
    def __init__(self, event_id: str, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_REGISTERED,
            message="You are not registered for this event",
        )
        self.event_id = event_id
        self.user_id = user_id


class RepositoryError(DomainError):
    """Raised when the backing store fails. The cause is kept for logging only."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(
            code=ErrorCode.REPOSITORY_ERROR,
            message="The event store is unavailable, please try again",
        )
        self.cause = cause


class UnknownOutcomeError(DomainError):
    """Raised when a mutation may or may not have been applied."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_OUTCOME,
            message="The request could not be confirmed, refresh to see the current state",
        )
        self.reason = reason


class NotificationNotFoundError(DomainError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOTIFICATION_NOT_FOUND,
            message="Notification not found",
        )
        self.notification_id = notification_id


class InvalidNotificationIdError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_NOTIFICATION_ID,
            message="Invalid notification ID format",
        )
