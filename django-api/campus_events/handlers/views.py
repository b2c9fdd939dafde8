"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from campus_events.domain import UserId
from campus_events.domain.errors import DomainError, ErrorCode, RepositoryError
from campus_events.handlers.serializers import (
    CatalogSummarySerializer,
    DashboardSerializer,
    EventInputSerializer,
    EventQuerySerializer,
    EventRecordSerializer,
    EventSerializer,
    NotificationSerializer,
)
from campus_events.services.event_service import parse_user_id
from campus_events.services.factory import build_event_service, build_notification_service

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NOTIFICATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_NOTIFICATION_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.AT_CAPACITY: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.REPOSITORY_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.UNKNOWN_OUTCOME: status.HTTP_504_GATEWAY_TIMEOUT,
}


def _user_id(request: Request) -> str | None:
    if request.user and request.user.is_authenticated:
        return str(request.user.pk)
    return None


def _viewer(request: Request) -> UserId:
    return parse_user_id(str(request.user.pk))


class DomainAPIView(APIView):
    """Base view that renders domain errors as ``{"code", "message"}`` responses."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            if isinstance(exc, RepositoryError):
                logger.error(
                    "Store failure on %s %s: %r", self.request.method, self.request.path, exc.cause
                )
            return Response(
                {"code": exc.code.value, "message": exc.message},
                status=STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
            )
        return super().handle_exception(exc)


class EventListView(DomainAPIView):
    """Handler for GET/POST /api/events"""

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminUser()]
        return [AllowAny()]

    def get(self, request: Request) -> Response:
        query = EventQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        overviews = async_to_sync(build_event_service().browse)(
            search=query.validated_data.get("search", ""),
            category=query.validated_data.get("category"),
            status=query.validated_data.get("status"),
            user_id=_user_id(request),
        )
        return Response(EventSerializer(overviews, many=True).data)

    def post(self, request: Request) -> Response:
        payload = EventInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        event = async_to_sync(build_event_service().create_event)(payload.validated_data)
        return Response(EventRecordSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(DomainAPIView):
    """Handler for GET/PUT/PATCH/DELETE /api/events/{event_id}"""

    def get_permissions(self):
        if self.request.method in ("PUT", "PATCH", "DELETE"):
            return [IsAdminUser()]
        return [AllowAny()]

    def get(self, request: Request, event_id: str) -> Response:
        overview = async_to_sync(build_event_service().get_overview)(event_id, _user_id(request))
        return Response(EventSerializer(overview).data)

    def put(self, request: Request, event_id: str) -> Response:
        return self._update(request, event_id, partial=False)

    def patch(self, request: Request, event_id: str) -> Response:
        return self._update(request, event_id, partial=True)

    def _update(self, request: Request, event_id: str, *, partial: bool) -> Response:
        payload = EventInputSerializer(data=request.data, partial=partial)
        payload.is_valid(raise_exception=True)
        event = async_to_sync(build_event_service().update_event)(event_id, payload.validated_data)
        return Response(EventRecordSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        async_to_sync(build_event_service().delete_event)(event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventRegistrationView(DomainAPIView):
    """Handler for POST/DELETE /api/events/{event_id}/registration"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        overview = async_to_sync(build_event_service().register)(event_id, _user_id(request))
        return Response(EventSerializer(overview).data, status=status.HTTP_201_CREATED)

    def delete(self, request: Request, event_id: str) -> Response:
        overview = async_to_sync(build_event_service().unregister)(event_id, _user_id(request))
        return Response(EventSerializer(overview).data)


class MyRegistrationsView(DomainAPIView):
    """Handler for GET /api/me/registrations"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        groups = async_to_sync(build_event_service().dashboard)(_user_id(request))
        return Response(
            DashboardSerializer({group.value: items for group, items in groups.items()}).data
        )


class CatalogSummaryView(DomainAPIView):
    """Handler for GET /api/admin/summary"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        summary = async_to_sync(build_event_service().summary)()
        return Response(CatalogSummarySerializer(summary).data)


class NotificationListView(DomainAPIView):
    """Handler for GET /api/notifications"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        notifications = async_to_sync(build_notification_service().list_for_user)(
            _viewer(request)
        )
        return Response(
            {
                "unread": sum(1 for n in notifications if not n.is_read),
                "results": NotificationSerializer(notifications, many=True).data,
            }
        )


class NotificationReadView(DomainAPIView):
    """Handler for POST /api/notifications/{notification_id}/read"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, notification_id: str) -> Response:
        async_to_sync(build_notification_service().mark_read)(_viewer(request), notification_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class NotificationReadAllView(DomainAPIView):
    """Handler for POST /api/notifications/read-all"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        changed = async_to_sync(build_notification_service().mark_all_read)(_viewer(request))
        return Response({"marked_read": changed})


class NotificationDetailView(DomainAPIView):
    """Handler for DELETE /api/notifications/{notification_id}"""

    permission_classes = [IsAuthenticated]

    def delete(self, request: Request, notification_id: str) -> Response:
        async_to_sync(build_notification_service().delete)(_viewer(request), notification_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
