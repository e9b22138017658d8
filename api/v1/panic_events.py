"""
Panic event history endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import Identity, get_current_identity
from repositories.panic_event import PanicEventRepository
from schemas.panic_event import PanicEventCreate, PanicEventCreated, PanicEventRead, PanicEventUpdate
from schemas.responses import StandardSuccessResponse

router = APIRouter()


@router.post("", response_model=PanicEventCreated, status_code=status.HTTP_201_CREATED)
async def record_panic_event(
    body: PanicEventCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    event = await PanicEventRepository(db).record(identity.user_id, body.cause)
    return PanicEventCreated(id=event.id)


@router.get("", response_model=List[PanicEventRead])
async def list_panic_events(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Caller's own events, newest first."""
    return await PanicEventRepository(db).list_for_owner(identity.user_id)


@router.patch("/{event_id}", response_model=PanicEventRead)
async def amend_panic_event_cause(
    event_id: int,
    body: PanicEventUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Set or replace the cause. Events owned by someone else are a 404."""
    return await PanicEventRepository(db).update_cause(event_id, identity.user_id, body.cause)


@router.delete("/{event_id}", response_model=StandardSuccessResponse)
async def delete_panic_event(
    event_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    await PanicEventRepository(db).delete(event_id, identity.user_id)
    return StandardSuccessResponse(message="Record deleted")
