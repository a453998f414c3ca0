"""Wager API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user_id
from database.dependencies import get_db
from schemas import (
    CounterOfferCreate,
    CustomOfferCreate,
    OfferCreate,
    OppositeView,
    WagerResponse,
    WagerStatus,
)
from services import league_service, wager_service

router = APIRouter(tags=["Wagers"])


@router.get("/leagues/{league_id}/wagers", response_model=list[WagerResponse])
async def list_wagers(
    league_id: UUID,
    wager_status: Optional[WagerStatus] = Query(default=None, alias="status"),
    mine: bool = False,
    limit: int = Query(default=100, ge=1, le=500),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List a league's wagers, optionally only the caller's."""
    await league_service.require_member(db, league_id, user_id)
    return await wager_service.list_wagers(
        db,
        league_id,
        status=wager_status,
        user_id=user_id if mine else None,
        limit=limit,
    )


@router.post(
    "/leagues/{league_id}/wagers",
    response_model=WagerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_offer(
    league_id: UUID,
    offer: OfferCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Offer a spread wager on one side of a matchup."""
    return await wager_service.create_offer(db, league_id, user_id, offer)


@router.post(
    "/leagues/{league_id}/wagers/custom",
    response_model=WagerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_custom_offer(
    league_id: UUID,
    offer: CustomOfferCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Offer a free-text wager."""
    return await wager_service.create_custom_offer(db, league_id, user_id, offer)


@router.get("/wagers/{wager_id}", response_model=WagerResponse)
async def get_wager(
    wager_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get wager details."""
    wager = await wager_service.require_wager(db, wager_id)
    await league_service.require_member(db, wager.league_id, user_id)
    return wager


@router.get("/wagers/{wager_id}/opposite", response_model=OppositeView)
async def get_opposite_view(
    wager_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Position and payout the accepting party would take."""
    wager = await wager_service.require_wager(db, wager_id)
    await league_service.require_member(db, wager.league_id, user_id)
    return wager_service.get_opposite_view(wager)


@router.post("/wagers/{wager_id}/accept", response_model=WagerResponse)
async def accept_wager(
    wager_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Accept an offered wager."""
    return await wager_service.accept_wager(db, wager_id, user_id)


@router.post(
    "/wagers/{wager_id}/counter",
    response_model=WagerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_counter_offer(
    wager_id: UUID,
    counter: CounterOfferCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Counter an offered wager with new terms on the other side."""
    return await wager_service.create_counter_offer(db, wager_id, user_id, counter)
