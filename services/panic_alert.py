"""
Panic alert pipeline: persist the event, resolve who to alert, fan out.
"""

from typing import Optional

from core.exceptions import StorageError
from core.logging import get_logger
from core.security import Identity
from repositories.emergency_contact import EmergencyContactRepository
from repositories.panic_event import PanicEventRepository
from schemas.panic_event import TriggerPayload
from services.notifier import DeliveryReport, EventContext, Notifier

logger = get_logger(__name__)


class PanicAlertService:
    def __init__(self, session_factory, notifier: Notifier):
        self.session_factory = session_factory
        self.notifier = notifier

    async def trigger(self, identity: Identity, payload: TriggerPayload) -> Optional[DeliveryReport]:
        """Run one panic alert.

        Returns the delivery report, or None when a storage step failed and
        the alert was dropped. A failure after the event was recorded leaves
        the event in place.
        """
        try:
            async with self.session_factory() as session:
                event = await PanicEventRepository(session).record(identity.user_id, payload.cause)
                event_id = event.id
        except StorageError as e:
            logger.error("Error recording panic event", user_id=identity.user_id, error=e.message)
            return None

        try:
            async with self.session_factory() as session:
                recipients = await EmergencyContactRepository(session).watchers_of(identity.user_id)
        except StorageError as e:
            logger.error("Error fetching contacts", user_id=identity.user_id, event_id=event_id, error=e.message)
            return None

        logger.info(
            "Panic event recorded",
            user_id=identity.user_id,
            event_id=event_id,
            recipients=len(recipients),
        )

        context = EventContext(
            event_id=event_id,
            location=payload.location,
            coordinates=payload.coordinates,
        )
        return await self.notifier.notify_contacts_of(identity, context, recipients)
