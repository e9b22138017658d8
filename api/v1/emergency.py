"""
Emergency Contacts API endpoints.

Handles emergency contact management.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import Identity, get_current_identity
from repositories.emergency_contact import EmergencyContactRepository
from schemas.emergency import ContactCreate, ContactRead

router = APIRouter()


@router.get("/contacts", response_model=List[ContactRead])
async def get_emergency_contacts(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Get emergency contacts, most recently added first."""
    return await EmergencyContactRepository(db).contacts_of(identity.user_id)


@router.post("/contacts", response_model=ContactRead, status_code=status.HTTP_201_CREATED)
async def create_emergency_contact(
    body: ContactCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Add an existing user, by name, as an emergency contact."""
    return await EmergencyContactRepository(db).add(identity.user_id, body.name.strip())
