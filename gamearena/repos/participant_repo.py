"""
Participant repository for tournament membership
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc

from gamearena.models.participant import Participant
from gamearena.models.tournament import Tournament


async def count_participants(session: AsyncSession, tournament_id: UUID) -> int:
    """Number of participant rows for a tournament."""
    result = await session.execute(
        select(func.count(Participant.id)).where(Participant.tournament_id == tournament_id)
    )
    return result.scalar_one()


async def get_participant(
    session: AsyncSession,
    tournament_id: UUID,
    user_id: UUID
) -> Optional[Participant]:
    """
    Get the participant row for (tournament, user).

    Args:
        session: Database session
        tournament_id: Tournament UUID
        user_id: User UUID

    Returns:
        Participant instance or None if the user has not joined
    """
    result = await session.execute(
        select(Participant).where(
            Participant.tournament_id == tournament_id,
            Participant.user_id == user_id
        )
    )
    return result.scalar_one_or_none()


async def get_participant_by_transaction(session: AsyncSession, transaction_id: UUID) -> Optional[Participant]:
    result = await session.execute(
        select(Participant).where(Participant.transaction_id == transaction_id)
    )
    return result.scalar_one_or_none()


async def insert_participant(
    session: AsyncSession,
    tournament_id: UUID,
    user_id: UUID,
    transaction_id: UUID,
    payment_status: str = 'completed'
) -> Participant:
    """
    Insert a participant row. Flushes so the unique constraint on
    (tournament_id, user_id) is checked now; does not commit.
    """
    participant = Participant(
        tournament_id=tournament_id,
        user_id=user_id,
        transaction_id=transaction_id,
        payment_status=payment_status
    )
    session.add(participant)
    await session.flush()
    return participant


async def get_user_participations(
    session: AsyncSession,
    user_id: UUID,
    limit: Optional[int] = None
) -> List[tuple]:
    """
    A user's participations with their tournaments, newest first. No limit
    by default, since profile stats aggregate over every entry.

    Returns:
        List of (Participant, Tournament) pairs
    """
    query = (
        select(Participant, Tournament)
        .join(Tournament, Tournament.id == Participant.tournament_id)
        .where(Participant.user_id == user_id)
        .order_by(desc(Participant.joined_at))
    )
    if limit is not None:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.all())
