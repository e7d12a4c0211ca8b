"""
Profile API endpoints
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gamearena.core.auth import AuthenticatedUser, get_current_user
from gamearena.db.session import get_db
from gamearena.repos.user_repo import create_profile, get_profile_by_id, update_profile
from gamearena.services.profile_stats import get_achievements, get_game_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile")

USERNAME_MAX_LENGTH = 48


class ProfileUpdate(BaseModel):
    """Profile update request model"""
    username: Optional[str] = Field(None, max_length=USERNAME_MAX_LENGTH)
    full_name: Optional[str] = Field(None, alias="fullName")
    bio: Optional[str] = None
    steam_id: Optional[str] = Field(None, alias="steamId")
    epic_games_id: Optional[str] = Field(None, alias="epicGamesId")
    riot_id: Optional[str] = Field(None, alias="riotId")


def _username_candidates(user: AuthenticatedUser) -> List[Optional[str]]:
    """
    Usernames to try for a new profile: the email local part, then the same
    with a suffix from the user id, then none at all.
    """
    local_part = user.email.split("@")[0] if user.email else ""
    if not local_part:
        return [None]
    suffix = user.id.hex[:8]
    return [
        local_part[:USERNAME_MAX_LENGTH],
        f"{local_part[:USERNAME_MAX_LENGTH - len(suffix) - 1]}_{suffix}",
        None,
    ]


async def _create_first_profile(session: AsyncSession, user: AuthenticatedUser):
    for username in _username_candidates(user):
        try:
            async with session.begin_nested():
                profile = await create_profile(session, user.id, username=username)
        except IntegrityError:
            # Taken username, or a concurrent first request created the row
            existing = await get_profile_by_id(session, user.id)
            if existing:
                return existing
            logger.info(f"Username {username} taken, trying next candidate for user {user.id}")
            continue
        logger.info(f"Created profile for user {user.id} as {username}")
        return profile
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Could not create profile"
    )


async def _profile_payload(session: AsyncSession, profile) -> dict:
    achievements = await get_achievements(session, profile.id)
    return {
        **profile.to_dict(),
        "game_stats": await get_game_stats(session, profile.id),
        "high_roller": achievements["high_roller"],
        "hat_trick": achievements["hat_trick"],
    }


@router.get("")
async def get_my_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """
    Caller's profile with game stats and achievements. A profile is created
    on first access, named after the local part of the token email.
    """
    profile = await get_profile_by_id(session, current_user.id)
    if not profile:
        profile = await _create_first_profile(session, current_user)
        await session.commit()

    return await _profile_payload(session, profile)


@router.put("")
async def update_my_profile(
    update: ProfileUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Update the caller's editable profile fields."""
    try:
        profile = await update_profile(session, current_user.id, **update.model_dump())
        if not profile:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Profile not found"
            )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username is already taken"
        )

    return profile.to_dict()


@router.get("/{user_id}")
async def get_public_profile(
    user_id: UUID,
    session: AsyncSession = Depends(get_db)
):
    """Another player's public profile."""
    profile = await get_profile_by_id(session, user_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    return await _profile_payload(session, profile)
