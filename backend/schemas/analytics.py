"""Bet analytics and ledger Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from schemas.common import BaseSchema
from schemas.wager import TransactionType


class BetAnalytics(BaseSchema):
    """Betting record of one user in one league."""

    total_bets: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    win_rate: float = 0.0
    total_wagered: int = 0
    total_won: int = 0
    total_lost: int = 0
    net_profit: int = 0
    average_bet_size: float = 0.0
    largest_win: int = 0
    largest_loss: int = 0
    current_streak: int = 0
    best_streak: int = 0


class TransactionResponse(BaseSchema):
    """Ledger entry."""

    id: UUID
    user_id: UUID
    league_id: UUID
    bet_id: Optional[UUID]
    amount: int
    type: TransactionType
    description: Optional[str]
    created_at: datetime
