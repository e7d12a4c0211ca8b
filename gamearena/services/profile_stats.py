"""
Per-game statistics and achievements for player profiles
"""

from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamearena.core.config import settings
from gamearena.models.enums import TransactionStatus, TransactionType
from gamearena.models.transaction import Transaction
from gamearena.repos.participant_repo import get_user_participations


async def _prize_totals_by_tournament(session: AsyncSession, user_id: UUID) -> Dict[UUID, Decimal]:
    result = await session.execute(
        select(Transaction.tournament_id, Transaction.amount)
        .where(
            Transaction.user_id == user_id,
            Transaction.type == TransactionType.TOURNAMENT_PRIZE.value,
            Transaction.status == TransactionStatus.COMPLETED.value,
            Transaction.tournament_id.isnot(None)
        )
    )
    totals: Dict[UUID, Decimal] = {}
    for tournament_id, amount in result.all():
        totals[tournament_id] = totals.get(tournament_id, Decimal('0')) + Decimal(str(amount))
    return totals


async def get_game_stats(session: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
    """
    Tournaments played, wins, win rate and prize earnings per game, in order
    of most recent participation.
    """
    participations = await get_user_participations(session, user_id)
    prizes = await _prize_totals_by_tournament(session, user_id)

    stats: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for participant, tournament in participations:
        entry = stats.setdefault(tournament.game_name, {
            "game": tournament.game_name,
            "tournaments": 0,
            "wins": 0,
            "earnings": Decimal('0'),
        })
        entry["tournaments"] += 1
        if participant.placement == 1:
            entry["wins"] += 1
        entry["earnings"] += prizes.get(tournament.id, Decimal('0'))

    game_stats = []
    for entry in stats.values():
        win_rate = round(entry["wins"] * 100.0 / entry["tournaments"], 1) if entry["tournaments"] else 0.0
        game_stats.append({
            "game": entry["game"],
            "tournaments": entry["tournaments"],
            "wins": entry["wins"],
            "winRate": win_rate,
            "earnings": float(entry["earnings"]),
        })
    return game_stats


async def get_achievements(session: AsyncSession, user_id: UUID) -> Dict[str, bool]:
    """
    high_roller: joined a tournament with a fee at or above the configured
    threshold. hat_trick: won at least the configured number of tournaments.
    """
    participations = await get_user_participations(session, user_id)
    threshold = Decimal(str(settings.high_roller_entry_fee))

    high_roller = any(Decimal(str(t.entry_fee)) >= threshold for _, t in participations)
    wins = sum(1 for p, _ in participations if p.placement == 1)

    return {
        "high_roller": high_roller,
        "hat_trick": wins >= settings.hat_trick_wins,
    }

