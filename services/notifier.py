"""
Panic notification fan-out.

For every resolved recipient the notifier looks up live connections in the
registry and pushes a ``notification`` event. Recipients without a live
connection are skipped; nothing is queued or retried.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from core.config import settings
from core.logging import get_logger
from core.security import Identity
from schemas.emergency import ContactRead
from schemas.notification import EmergencyContactInfo, Notification
from services.connection_registry import ConnectionRegistry

logger = get_logger(__name__)

NOTIFICATION_EVENT = "notification"
DEFAULT_LOCATION = "Location unavailable"


@dataclass
class EventContext:
    event_id: Optional[int] = None
    location: Optional[str] = None
    coordinates: Optional[Any] = None


@dataclass
class DeliveryReport:
    """Outcome of one fan-out. Only returned to the server side, never to the triggering user."""

    event_id: Optional[int] = None
    delivered: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    sessions: int = 0

    @property
    def notified(self) -> int:
        return len(self.delivered)


def build_message(name: str, location: str) -> str:
    return f"{name} is under attack!\nGo to the rescue at {location}"


class Notifier:
    """Pushes panic notifications over a Socket.IO-style transport.

    ``transport`` is anything exposing ``await emit(event, data, to=sid)``;
    in production that is the ``socketio.AsyncServer`` itself.
    """

    def __init__(
        self,
        transport,
        registry: ConnectionRegistry,
        emergency_contact: Optional[EmergencyContactInfo] = None,
        notify_all_sessions: Optional[bool] = None,
    ):
        self.transport = transport
        self.registry = registry
        self.emergency_contact = emergency_contact or EmergencyContactInfo(
            email=settings.EMERGENCY_CONTACT_EMAIL,
            phone=settings.EMERGENCY_CONTACT_PHONE,
        )
        if notify_all_sessions is None:
            notify_all_sessions = settings.NOTIFY_ALL_SESSIONS
        self.notify_all_sessions = notify_all_sessions

    def build_notification(self, identity: Identity, context: EventContext) -> Notification:
        location = context.location or DEFAULT_LOCATION
        return Notification(
            message=build_message(identity.name, location),
            timestamp=datetime.now(timezone.utc),
            owner_id=identity.user_id,
            location=location,
            coordinates=context.coordinates,
            emergency_contact=self.emergency_contact,
        )

    def live_sessions(self, user_id: int) -> List[str]:
        if self.notify_all_sessions:
            return self.registry.find_all_by_user_id(user_id)
        sid = self.registry.find_by_user_id(user_id)
        return [sid] if sid else []

    async def notify_contacts_of(
        self,
        identity: Identity,
        context: EventContext,
        recipients: Iterable[ContactRead],
    ) -> DeliveryReport:
        report = DeliveryReport(event_id=context.event_id)
        payload = self.build_notification(identity, context).model_dump(mode="json", by_alias=True)

        for contact in recipients:
            sids = self.live_sessions(contact.id)
            if not sids:
                report.skipped.append(contact.id)
                continue

            pushed = errored = False
            for sid in sids:
                # a disconnect may have run since the lookup
                if sid not in self.registry:
                    continue
                try:
                    await self.transport.emit(NOTIFICATION_EVENT, payload, to=sid)
                    pushed = True
                    report.sessions += 1
                except Exception as e:
                    errored = True
                    logger.error("Notification push failed", sid=sid, contact_id=contact.id, error=str(e))

            if pushed:
                report.delivered.append(contact.id)
            elif errored:
                report.failed.append(contact.id)
            else:
                report.skipped.append(contact.id)

        logger.info(
            "Panic notification fan-out finished",
            owner_id=identity.user_id,
            event_id=context.event_id,
            delivered=report.delivered,
            skipped=len(report.skipped),
            failed=len(report.failed),
        )
        return report
