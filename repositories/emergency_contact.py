"""
Emergency contact links and their resolution.

A link ``owner -> contact`` means the owner listed the contact as someone to
alert. When a user triggers a panic event, the users alerted are the owners of
links pointing at that user (``watchers_of``).
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundError, StorageError, ValidationError
from models.emergency import EmergencyContact
from models.user import User
from schemas.emergency import ContactRead

logger = logging.getLogger(__name__)


class EmergencyContactRepository:
    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def add(self, owner_id: int, contact_name: str) -> ContactRead:
        """Link the user named ``contact_name`` as an emergency contact of ``owner_id``."""
        try:
            result = await self.db_session.execute(select(User).where(User.name == contact_name))
            contact = result.scalar_one_or_none()
            if contact is None:
                raise NotFoundError(f"User '{contact_name}' not found")

            if contact.id == owner_id:
                raise ValidationError("You cannot add yourself as an emergency contact")

            result = await self.db_session.execute(
                select(EmergencyContact.id).where(
                    EmergencyContact.owner_id == owner_id,
                    EmergencyContact.contact_id == contact.id,
                )
            )
            if result.scalar_one_or_none() is not None:
                raise ValidationError("Contact already exists")

            added = ContactRead.model_validate(contact)
            self.db_session.add(EmergencyContact(owner_id=owner_id, contact_id=contact.id))
            await self.db_session.commit()
            logger.info(f"User {owner_id} added contact {added.id}")
            return added

        except IntegrityError as e:
            await self.db_session.rollback()
            raise ValidationError("Contact already exists") from e
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.exception(f"Database error in add contact: {str(e)}")
            raise StorageError("Error adding contact. Please try again.") from e

    async def contacts_of(self, owner_id: int) -> List[ContactRead]:
        """Users ``owner_id`` listed, most recently added first."""
        query = (
            select(User)
            .join(EmergencyContact, EmergencyContact.contact_id == User.id)
            .where(EmergencyContact.owner_id == owner_id)
            .order_by(EmergencyContact.created_at.desc(), EmergencyContact.id.desc())
        )
        return await self._fetch(query, "contacts_of")

    async def watchers_of(self, user_id: int) -> List[ContactRead]:
        """Users who listed ``user_id`` as their contact, most recent link first."""
        query = (
            select(User)
            .join(EmergencyContact, EmergencyContact.owner_id == User.id)
            .where(EmergencyContact.contact_id == user_id)
            .order_by(EmergencyContact.created_at.desc(), EmergencyContact.id.desc())
        )
        return await self._fetch(query, "watchers_of")

    async def _fetch(self, query, operation: str) -> List[ContactRead]:
        try:
            result = await self.db_session.execute(query)
            return [ContactRead.model_validate(user) for user in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.exception(f"Database error in {operation}: {str(e)}")
            raise StorageError("Database error") from e
