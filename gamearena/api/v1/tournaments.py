"""
Tournament API endpoints
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, status, Depends, Header, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gamearena.core.auth import AuthenticatedUser, get_current_user, get_optional_user
from gamearena.core.metrics import TOURNAMENT_JOIN_COUNT
from gamearena.db.session import get_db, get_session_factory
from gamearena.repos.tournament_repo import get_tournament_by_id, list_tournaments
from gamearena.services.feed import order_feed, parse_max_fee, summarize_tournament, tournament_detail
from gamearena.services.errors import SettlementError
from gamearena.services.settlement import EntrySettlementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tournaments")


def get_settlement_service(
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> EntrySettlementService:
    return EntrySettlementService(session_factory)


def _parse_tournament_id(tournament_id: str) -> UUID:
    try:
        return UUID(tournament_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tournament not found"
        )


@router.get("")
async def get_tournaments(
    game: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    max_fee: Optional[str] = Query(None, alias="maxFee"),
    featured: bool = False,
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db)
):
    """
    Tournament feed with optional game, fee ceiling, sort and featured
    filters. Room credentials are only included for tournaments the caller
    has joined.
    """
    try:
        fee_ceiling = parse_max_fee(max_fee)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    tournaments = await list_tournaments(session, game=game, max_fee=fee_ceiling)
    user_id = current_user.id if current_user else None
    summaries = [summarize_tournament(t, user_id) for t in tournaments]
    return order_feed(summaries, sort_by=sort_by, featured=featured)


@router.get("/{tournament_id}")
async def get_tournament(
    tournament_id: str,
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_db)
):
    """Single tournament summary."""
    tournament = await get_tournament_by_id(session, _parse_tournament_id(tournament_id))
    if not tournament:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tournament not found"
        )
    return tournament_detail(tournament, current_user.id if current_user else None)


@router.post("/{tournament_id}/join")
async def join_tournament_endpoint(
    tournament_id: str,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: EntrySettlementService = Depends(get_settlement_service)
):
    """
    Join a tournament.

    Debits the entry fee and registers the caller in one transaction.
    Failures return a JSON body with `error` and `code`; insufficient funds
    also carries `requiredAmount` and `currentBalance`.
    """
    tournament_uuid = _parse_tournament_id(tournament_id)

    try:
        result = await service.join_tournament(
            current_user.id,
            tournament_uuid,
            idempotency_key=idempotency_key
        )
    except SettlementError as e:
        TOURNAMENT_JOIN_COUNT.labels(status=e.code).inc()
        logger.info(f"Join of tournament {tournament_id} by {current_user.id} refused: {e.code}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    TOURNAMENT_JOIN_COUNT.labels(status="replayed" if result.replayed else "success").inc()
    return {
        "success": True,
        "message": "Successfully joined tournament",
        "transactionId": str(result.transaction_id),
        "balance": float(result.balance),
        "replayed": result.replayed
    }
