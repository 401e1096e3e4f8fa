"""Authentication endpoints.

Tokens are issued by the identity provider in front of this service; here
accounts are created and the bearer of a valid token is resolved.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.core.exceptions import ValidationError
from app.core.middleware import register_limiter
from app.models.registry import get_user_model
from app.models.user import User
from app.schemas.user import UserCreate, UserEnvelope, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserEnvelope:
    """Register a new traveler or guide account."""
    UserModel = get_user_model()

    # Check if email already exists
    result = await db.execute(select(UserModel).where(UserModel.email == user_data.email))
    if result.scalar_one_or_none():
        raise ValidationError("Email already registered")

    user = UserModel(
        email=user_data.email,
        name=user_data.name,
        role=user_data.role,
    )
    user.set_password(user_data.password)
    db.add(user)
    await db.flush()

    logger.info(f"Registered {user.role} account {user.id}")
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserEnvelope)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserEnvelope:
    """Get the account behind the current token."""
    return UserEnvelope(user=UserResponse.model_validate(current_user))
