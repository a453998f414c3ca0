"""League API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user_id, get_sleeper_client
from database.dependencies import get_db
from schemas import (
    BetAnalytics,
    LeagueCreate,
    LeagueResponse,
    MatchupSpreadResponse,
    ProfileResponse,
    SyncRequest,
    SyncResponse,
    TransactionResponse,
)
from services import SyncService, get_bet_analytics, league_service, ledger_service
from services.sleeper import SleeperAPIError, SleeperClient

router = APIRouter(prefix="/leagues", tags=["Leagues"])


@router.post("", response_model=LeagueResponse, status_code=status.HTTP_201_CREATED)
async def create_league(
    data: LeagueCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Register a Sleeper league; the caller becomes its owner."""
    return await league_service.create_league(db, data, user_id)


@router.get("", response_model=list[LeagueResponse])
async def list_my_leagues(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Leagues the caller belongs to."""
    return await league_service.list_user_leagues(db, user_id)


@router.post("/{league_id}/join", response_model=ProfileResponse)
async def join_league(
    league_id: UUID,
    display_name: Optional[str] = Query(default=None, max_length=100),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Join a league, creating the caller's token profile if needed."""
    await league_service.join_league(db, league_id, user_id, display_name)
    return await ledger_service.get_profile(db, user_id)


@router.get(
    "/{league_id}/matchups/{week}/spreads",
    response_model=list[MatchupSpreadResponse],
)
async def get_matchup_spreads(
    league_id: UUID,
    week: int,
    season: int = Query(..., ge=2000),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Projected totals and spreads for a week's matchups."""
    if week < 1:
        raise HTTPException(status_code=400, detail="week must be >= 1")
    await league_service.require_member(db, league_id, user_id)
    return await league_service.get_matchup_spreads(db, league_id, week, season)


@router.post("/{league_id}/sync", response_model=SyncResponse)
async def sync_league(
    league_id: UUID,
    request: Optional[SyncRequest] = None,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    client: SleeperClient = Depends(get_sleeper_client),
):
    """Pull rosters, matchups and projections from Sleeper."""
    await league_service.require_member(db, league_id, user_id)
    try:
        return await SyncService(client).sync_league(db, league_id, request)
    except SleeperAPIError as e:
        raise HTTPException(status_code=502, detail=f"Sleeper sync failed: {e}")


@router.get("/{league_id}/analytics", response_model=BetAnalytics)
async def get_analytics(
    league_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's betting record in the league."""
    await league_service.require_member(db, league_id, user_id)
    return await get_bet_analytics(db, user_id, league_id)


@router.get("/{league_id}/transactions", response_model=list[TransactionResponse])
async def get_transactions(
    league_id: UUID,
    limit: int = Query(default=100, ge=1, le=500),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's ledger entries in the league, newest first."""
    await league_service.require_member(db, league_id, user_id)
    return await ledger_service.list_transactions(db, user_id, league_id, limit=limit)
