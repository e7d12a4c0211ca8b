"""
Profile repository with async CRUD operations
"""

from typing import Optional, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from gamearena.models.user import Profile
from gamearena.repos.filters import LIKE_ESCAPE, contains_pattern

# Columns a user may change through the profile endpoint
EDITABLE_PROFILE_FIELDS = ("username", "full_name", "bio", "steam_id", "epic_games_id", "riot_id")


async def create_profile(
    session: AsyncSession,
    user_id: UUID,
    username: Optional[str] = None,
    full_name: str = "",
    avatar_url: str = ""
) -> Profile:
    """
    Create a profile for an auth user. Flushes; does not commit.

    Args:
        session: Database session
        user_id: Auth user id (becomes the profile id)
        username: Display name
        full_name: Full name
        avatar_url: Avatar URL

    Returns:
        Created Profile instance
    """
    profile = Profile(
        id=user_id,
        username=username,
        full_name=full_name,
        avatar_url=avatar_url
    )
    session.add(profile)
    await session.flush()
    return profile


async def get_profile_by_id(session: AsyncSession, user_id: UUID) -> Optional[Profile]:
    """
    Get profile by user ID.

    Args:
        session: Database session
        user_id: User UUID

    Returns:
        Profile instance or None if not found
    """
    result = await session.execute(
        select(Profile).where(Profile.id == user_id)
    )
    return result.scalar_one_or_none()


async def get_profile_by_username(session: AsyncSession, username: str) -> Optional[Profile]:
    result = await session.execute(
        select(Profile).where(Profile.username == username)
    )
    return result.scalar_one_or_none()


async def update_profile(session: AsyncSession, user_id: UUID, **fields) -> Optional[Profile]:
    """
    Update editable profile fields; None values are left untouched.

    Returns:
        Updated Profile or None if not found
    """
    profile = await get_profile_by_id(session, user_id)
    if not profile:
        return None

    for name in EDITABLE_PROFILE_FIELDS:
        value = fields.get(name)
        if value is not None:
            setattr(profile, name, value)

    await session.flush()
    return profile


async def search_profiles(session: AsyncSession, term: str, limit: int = 5) -> List[Profile]:
    """Case-insensitive substring match on username."""
    result = await session.execute(
        select(Profile)
        .where(Profile.username.ilike(contains_pattern(term), escape=LIKE_ESCAPE))
        .order_by(Profile.username)
        .limit(limit)
    )
    return list(result.scalars().all())
