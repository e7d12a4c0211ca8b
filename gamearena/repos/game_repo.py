"""
Game catalogue repository
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from gamearena.models.game import Game
from gamearena.repos.filters import LIKE_ESCAPE, contains_pattern


async def search_games(session: AsyncSession, term: str, limit: int = 5) -> List[Game]:
    """Case-insensitive substring match on game name."""
    result = await session.execute(
        select(Game)
        .where(Game.name.ilike(contains_pattern(term), escape=LIKE_ESCAPE))
        .order_by(Game.name)
        .limit(limit)
    )
    return list(result.scalars().all())
