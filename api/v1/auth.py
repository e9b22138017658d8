"""
Authentication API endpoints.

Sign-up and sign-in both hand back a signed identity token used as the bearer
token on REST calls and in the realtime ``authenticate`` message.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.exceptions import AuthenticationError
from core.security import Identity, sign_token
from repositories.user import UserRepository
from schemas.auth import SignInRequest, SignUpRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/signup",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Register a new user",
)
async def signup(body: SignUpRequest, db: AsyncSession = Depends(get_db)):
    """
    Register a user.

    - **name**: unique display name, used by others to add you as a contact
    - **email**: unique email address
    """
    repo = UserRepository(db)
    user = await repo.create_user(name=body.name, email=body.email)
    logger.info(f"User {user.id} signed up")

    token = sign_token(Identity(user_id=user.id, name=user.name))
    return TokenResponse(token=token, user_id=user.id)


@router.post("/signin", response_model=TokenResponse, summary="Sign in by name")
async def signin(body: SignInRequest, db: AsyncSession = Depends(get_db)):
    repo = UserRepository(db)
    user = await repo.get_user_by_name(body.name.strip())
    if not user:
        logger.info(f"User not found: {body.name}")
        raise AuthenticationError("User not found")

    token = sign_token(Identity(user_id=user.id, name=user.name))
    return TokenResponse(token=token, user_id=user.id)
