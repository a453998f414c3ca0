"""Settlement trigger API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_service_key
from database.dependencies import get_db
from schemas import GameResultResponse, SettleBetsRequest, SettleBetsResponse
from services import settlement_service

router = APIRouter(
    prefix="/settlement",
    tags=["Settlement"],
    dependencies=[Depends(require_service_key)],
)


@router.post("/settle-bets", response_model=SettleBetsResponse)
async def settle_bets(
    request: SettleBetsRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Settle a league week's active wagers against the supplied game results.

    Per-wager failures are reported in ``results`` rather than failing the
    whole request.
    """
    return await settlement_service.settle_bets(
        db,
        league_id=request.league_id,
        week=request.week,
        season=request.season,
        game_results=request.game_results,
    )


@router.get(
    "/leagues/{league_id}/results/{week}",
    response_model=list[GameResultResponse],
)
async def get_game_results(
    league_id: UUID,
    week: int,
    season: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Stored game results for a league week."""
    return await settlement_service.get_game_results(db, league_id, week, season)
