import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundError, StorageError
from models.panic_event import PanicEvent

logger = logging.getLogger(__name__)


class PanicEventRepository:
    """Records panic events and lets their owner amend or remove them."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def record(self, owner_id: int, cause: Optional[str] = None) -> PanicEvent:
        try:
            event = PanicEvent(owner_id=owner_id, cause=cause)
            self.db_session.add(event)
            await self.db_session.commit()
            await self.db_session.refresh(event)
            logger.info(f"Recorded panic event {event.id} for user {owner_id}")
            return event
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.exception(f"Error recording panic event: {str(e)}")
            raise StorageError("Error recording panic event") from e

    async def get_owned(self, event_id: int, owner_id: int) -> PanicEvent:
        """Fetch an event, treating someone else's event as missing."""
        try:
            result = await self.db_session.execute(
                select(PanicEvent).where(PanicEvent.id == event_id, PanicEvent.owner_id == owner_id)
            )
            event = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception(f"Database error in get_owned: {str(e)}")
            raise StorageError("Database error") from e

        if event is None:
            raise NotFoundError("Panic event not found")
        return event

    async def update_cause(self, event_id: int, owner_id: int, cause: Optional[str]) -> PanicEvent:
        event = await self.get_owned(event_id, owner_id)
        try:
            event.cause = cause
            await self.db_session.commit()
            await self.db_session.refresh(event)
            return event
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.exception(f"Error updating panic event {event_id}: {str(e)}")
            raise StorageError("Failed to update cause") from e

    async def list_for_owner(self, owner_id: int) -> List[PanicEvent]:
        """Owner's events, newest first."""
        try:
            result = await self.db_session.execute(
                select(PanicEvent)
                .where(PanicEvent.owner_id == owner_id)
                .order_by(PanicEvent.timestamp.desc(), PanicEvent.id.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.exception(f"Database error in list_for_owner: {str(e)}")
            raise StorageError("Failed to fetch panic event history") from e

    async def delete(self, event_id: int, owner_id: int) -> None:
        event = await self.get_owned(event_id, owner_id)
        try:
            await self.db_session.delete(event)
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.exception(f"Error deleting panic event {event_id}: {str(e)}")
            raise StorageError("Failed to delete record") from e
