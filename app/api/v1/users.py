"""User profile endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.user import UserEnvelope, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

# Columns that may not be cleared through a profile update
REQUIRED_PROFILE_FIELDS = {"name", "avatar", "languages"}


@router.get("/profile", response_model=UserEnvelope)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserEnvelope:
    """Get current user's profile."""
    return UserEnvelope(user=UserResponse.model_validate(current_user))


@router.patch("/profile", response_model=UserEnvelope)
async def update_profile(
    updates: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserEnvelope:
    """Update current user's profile; any update marks the profile completed."""
    update_data = updates.model_dump(exclude_unset=True)

    password = update_data.pop("password", None)
    if password:
        current_user.set_password(password)

    preferences = update_data.pop("preferences", None)
    if preferences is not None:
        current_user.preferences = {
            "tourTypes": preferences.get("tour_types", []),
            "languages": preferences.get("languages", []),
        }

    for field, value in update_data.items():
        if value is None and field in REQUIRED_PROFILE_FIELDS:
            continue
        setattr(current_user, field, value)

    current_user.profile_completed = True
    await db.flush()

    logger.info(f"Profile updated for user {current_user.id}")
    return UserEnvelope(user=UserResponse.model_validate(current_user))
