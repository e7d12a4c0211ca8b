"""
Tournament repository for the tournament registry
"""

from typing import List, Optional
from uuid import UUID
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload

from gamearena.models.tournament import Tournament
from gamearena.repos.filters import LIKE_ESCAPE, contains_pattern


async def get_tournament_by_id(session: AsyncSession, tournament_id: UUID) -> Optional[Tournament]:
    """
    Get tournament by ID, with its participant rows loaded.

    Args:
        session: Database session
        tournament_id: Tournament UUID

    Returns:
        Tournament instance or None if not found
    """
    result = await session.execute(
        select(Tournament)
        .options(selectinload(Tournament.participants))
        .where(Tournament.id == tournament_id)
    )
    return result.scalar_one_or_none()


async def lock_tournament_for_update(session: AsyncSession, tournament_id: UUID) -> Optional[Tournament]:
    """
    Load the tournament row under SELECT ... FOR UPDATE.

    Every join attempt for the same tournament queues on this lock, so the
    participant count read afterwards cannot change until the holder commits.
    """
    result = await session.execute(
        select(Tournament)
        .where(Tournament.id == tournament_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def list_tournaments(
    session: AsyncSession,
    game: Optional[str] = None,
    max_fee: Optional[Decimal] = None,
    limit: int = 200
) -> List[Tournament]:
    """
    List tournaments with participants loaded.

    Args:
        session: Database session
        game: Exact game name filter
        max_fee: Only tournaments with entry_fee <= max_fee
        limit: Maximum number of tournaments to return

    Returns:
        List of Tournament instances
    """
    query = select(Tournament).options(selectinload(Tournament.participants))

    if game:
        query = query.where(Tournament.game_name == game)

    if max_fee is not None:
        query = query.where(Tournament.entry_fee <= max_fee)

    query = query.order_by(Tournament.start_time).limit(limit)

    result = await session.execute(query)
    return list(result.scalars().all())


async def search_tournaments(session: AsyncSession, term: str, limit: int) -> List[Tournament]:
    """Case-insensitive substring match on title, game name and description."""
    pattern = contains_pattern(term)
    result = await session.execute(
        select(Tournament)
        .options(selectinload(Tournament.participants))
        .where(or_(
            Tournament.title.ilike(pattern, escape=LIKE_ESCAPE),
            Tournament.game_name.ilike(pattern, escape=LIKE_ESCAPE),
            Tournament.description.ilike(pattern, escape=LIKE_ESCAPE)
        ))
        .order_by(Tournament.start_time)
        .limit(limit)
    )
    return list(result.scalars().all())
