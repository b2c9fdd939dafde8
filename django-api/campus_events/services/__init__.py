from campus_events.services.event_service import EventService
from campus_events.services.notification_service import NotificationService
from campus_events.services.registration_ledger import RegistrationLedger

__all__ = ["EventService", "NotificationService", "RegistrationLedger"]
