"""
Tournament feed shaping: caller-specific summaries, fee filter parsing and
feed ordering
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from uuid import UUID

from gamearena.models.tournament import Tournament

SORT_OPTIONS = ("time-asc", "time-desc", "prize-asc", "prize-desc", "slots")


def parse_max_fee(max_fee: Optional[str]) -> Optional[Decimal]:
    """
    Parse the maxFee query value: "free" means 0, otherwise an integer
    ceiling. Returns None when no filter applies.
    """
    if not max_fee:
        return None
    if max_fee == "free":
        return Decimal('0')
    try:
        return Decimal(int(max_fee))
    except (ValueError, InvalidOperation):
        raise ValueError(f"Invalid maxFee value: {max_fee}")


def summarize_tournament(tournament: Tournament, user_id: Optional[UUID]) -> Dict[str, Any]:
    """Tournament summary for one caller; room credentials only for members."""
    participants = tournament.participants or []
    joined = user_id is not None and any(p.user_id == user_id for p in participants)

    return {
        "id": str(tournament.id),
        "title": tournament.title,
        "gameName": tournament.game_name,
        "gameCoverImage": tournament.game_cover_image,
        "description": tournament.description,
        "rules": tournament.rules or [],
        "startTime": tournament.start_time.isoformat() if tournament.start_time else None,
        "joinedPlayers": len(participants),
        "totalSlots": tournament.total_slots,
        "entryFee": float(tournament.entry_fee),
        "prizePool": float(tournament.prize_pool),
        "joined": joined,
        "roomId": tournament.room_id if joined else None,
        "roomPassword": tournament.room_password if joined else None,
        "status": tournament.status,
        "_start": tournament.start_time,
    }


def order_feed(
    summaries: List[Dict[str, Any]],
    sort_by: Optional[str] = None,
    featured: bool = False
) -> List[Dict[str, Any]]:
    """
    Order summaries for the feed. Featured always wins and puts the biggest
    prize pools first. Unknown sort keys keep the incoming order.
    """
    ordered = list(summaries)

    if sort_by == "time-asc":
        ordered.sort(key=lambda t: t["_start"])
    elif sort_by == "time-desc":
        ordered.sort(key=lambda t: t["_start"], reverse=True)
    elif sort_by == "prize-asc":
        ordered.sort(key=lambda t: t["prizePool"])
    elif sort_by == "prize-desc":
        ordered.sort(key=lambda t: t["prizePool"], reverse=True)
    elif sort_by == "slots":
        ordered.sort(key=lambda t: t["totalSlots"] - t["joinedPlayers"], reverse=True)

    if featured:
        ordered.sort(key=lambda t: t["prizePool"], reverse=True)

    return [_public(t) for t in ordered]


def _public(summary: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in summary.items() if not k.startswith("_")}


def tournament_detail(tournament: Tournament, user_id: Optional[UUID]) -> Dict[str, Any]:
    return _public(summarize_tournament(tournament, user_id))
