"""Admin API routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_service_key
from database.dependencies import get_db
from schemas import ResolveWagerRequest, SettlementItemResult, WagerResponse
from services import settlement_service, wager_service

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_service_key)],
)


@router.get("/wagers/review", response_model=list[WagerResponse])
async def list_review_wagers(
    league_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    """Active wagers flagged by settlement for manual grading."""
    return await wager_service.list_review_wagers(db, league_id)


@router.post("/wagers/{wager_id}/resolve", response_model=SettlementItemResult)
async def resolve_wager(
    wager_id: UUID,
    request: ResolveWagerRequest,
    db: AsyncSession = Depends(get_db),
):
    """Settle an active wager with an explicit outcome."""
    return await settlement_service.resolve_wager(
        db, wager_id, request.outcome, reason=request.reason
    )
