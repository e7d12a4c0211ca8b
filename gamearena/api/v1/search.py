"""
Search API endpoint
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamearena.db.session import get_db
from gamearena.repos.game_repo import search_games
from gamearena.repos.tournament_repo import search_tournaments
from gamearena.repos.user_repo import search_profiles

router = APIRouter()


def _tournament_hit(tournament) -> dict:
    joined = len(tournament.participants or [])
    return {
        "type": "tournament",
        "id": str(tournament.id),
        "title": tournament.title,
        "subtitle": f"{tournament.game_name} • {joined}/{tournament.total_slots} players",
        "description": f"Entry: ${tournament.entry_fee} • Prize: ${tournament.prize_pool}",
        "badge": tournament.game_name,
        "status": tournament.status,
    }


@router.get("/search")
async def search(
    q: Optional[str] = None,
    type: Optional[str] = None,
    session: AsyncSession = Depends(get_db)
):
    """
    Search players, games and tournaments. type=tournaments restricts the
    search to tournaments and returns more of them.
    """
    if not q:
        return []

    if type == "tournaments":
        return [_tournament_hit(t) for t in await search_tournaments(session, q, limit=8)]

    results = [
        {
            "type": "user",
            "id": str(profile.id),
            "title": profile.username,
            "subtitle": profile.full_name,
            "avatarUrl": profile.avatar_url,
        }
        for profile in await search_profiles(session, q, limit=5)
    ]
    results.extend(
        {"type": "game", "id": str(game.id), "title": game.name}
        for game in await search_games(session, q, limit=5)
    )
    results.extend(_tournament_hit(t) for t in await search_tournaments(session, q, limit=3))
    return results
