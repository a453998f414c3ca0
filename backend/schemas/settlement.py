"""Settlement Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, Field

from schemas.common import BaseSchema


class GameStatus(str, Enum):
    """Game progress; only final results settle wagers."""

    SCHEDULED = "scheduled"
    LIVE = "live"
    FINAL = "final"


class GameResultIn(BaseSchema):
    """One matchup score supplied to the settlement trigger."""

    league_id: Optional[UUID] = None
    week: Optional[int] = None
    season: Optional[int] = None
    home_roster_id: int
    away_roster_id: int
    home_points: float = Field(
        validation_alias=AliasChoices("home_points", "home_roster_points"),
    )
    away_points: float = Field(
        validation_alias=AliasChoices("away_points", "away_roster_points"),
    )
    status: GameStatus = GameStatus.FINAL


class GameResultResponse(BaseSchema):
    """Stored game result."""

    id: UUID
    league_id: UUID
    week: int
    season: int
    home_roster_id: int
    away_roster_id: int
    home_points: float
    away_points: float
    status: GameStatus
    recorded_at: datetime


class SettleBetsRequest(BaseSchema):
    """Batch settlement request for one league week."""

    league_id: UUID
    week: int = Field(ge=1)
    season: int
    game_results: list[GameResultIn]


class SettlementItemResult(BaseSchema):
    """Per-wager line of a batch settlement."""

    bet_id: UUID
    outcome: Optional[str] = None
    error: Optional[str] = None
    winner_id: Optional[UUID] = None
    payout_amount: Optional[int] = None
    message: Optional[str] = None


class SettleBetsResponse(BaseSchema):
    """Batch settlement summary."""

    message: str
    settled_count: int
    results: list[SettlementItemResult] = Field(default_factory=list)


class ResolveWagerRequest(BaseSchema):
    """Manual grading of an active wager."""

    outcome: Literal["won", "lost", "push"]
    reason: Optional[str] = Field(default=None, max_length=500)
