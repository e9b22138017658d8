from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional
import logging

from core.exceptions import StorageError, ValidationError
from models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def create_user(self, name: str, email: str) -> User:
        """Insert a user; duplicate name or email is a ValidationError."""
        try:
            query = select(User).where(or_(User.email == email, User.name == name))
            result = await self.db_session.execute(query)
            existing = result.scalars().first()
            if existing is not None:
                if existing.email == email:
                    raise ValidationError("Email already exists")
                raise ValidationError("Name already exists")

            new_user = User(name=name, email=email)
            self.db_session.add(new_user)
            await self.db_session.commit()
            await self.db_session.refresh(new_user)
            return new_user

        except IntegrityError as e:
            # lost a race with a concurrent sign-up
            await self.db_session.rollback()
            logger.warning(f"Integrity error in create_user: {str(e)}")
            raise ValidationError("Name or email already exists") from e
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.exception(f"Database error in create_user: {str(e)}")
            raise StorageError("Database error") from e

    async def get_user_by_name(self, name: str) -> Optional[User]:
        try:
            result = await self.db_session.execute(select(User).where(User.name == name))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception(f"Database error in get_user_by_name: {str(e)}")
            raise StorageError("Database error") from e
