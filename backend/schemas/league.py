"""League, roster and matchup Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from schemas.common import BaseSchema
from schemas.wager import BetSide


class LeagueCreate(BaseSchema):
    """Register a Sleeper league."""

    name: str = Field(min_length=1, max_length=200)
    external_id: str = Field(min_length=1, description="Sleeper league id")
    season: Optional[int] = None
    scoring_settings: Optional[dict[str, float]] = None


class LeagueResponse(BaseSchema):
    """League response schema."""

    id: UUID
    name: str
    provider: Optional[str]
    external_id: Optional[str]
    season: Optional[int]
    created_by: UUID
    created_at: datetime


class ProfileResponse(BaseSchema):
    """Profile with current balance."""

    id: UUID
    display_name: Optional[str]
    token_balance: int


class RosterRow(BaseSchema):
    """Roster as used by the spread model."""

    roster_id: int
    starters: list[str] = Field(default_factory=list)
    owner_sleeper_user_id: Optional[str] = None
    owner_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.owner_name or f"Team {self.roster_id}"


class ProjectionRow(BaseSchema):
    """Projected points for one player."""

    player_id: str
    projection_points: float = 0.0


class ProjectedSpread(BaseSchema):
    """Projected totals for two rosters; positive spread favors side A."""

    projected_a: float
    projected_b: float
    spread: float


class MatchupPair(BaseSchema):
    """Two rosters facing each other in a week (b missing on a bye)."""

    matchup_id: Optional[int]
    roster_a: int
    roster_b: Optional[int] = None


class MatchupSpreadResponse(BaseSchema):
    """Matchup with projected totals and spread."""

    matchup_index: int
    matchup_id: Optional[int]
    week: int
    season: int
    roster_a: int
    roster_b: Optional[int]
    team_a_name: str
    team_b_name: Optional[str]
    projected_a: float
    projected_b: float
    spread: float
    favored: Optional[BetSide]


class SyncRequest(BaseSchema):
    """Which Sleeper snapshots to refresh."""

    rosters: bool = True
    matchups: bool = True
    projections: bool = True
    weeks: Optional[list[int]] = None
    season: Optional[int] = None
    week: Optional[int] = Field(default=None, ge=1)


class SyncResponse(BaseSchema):
    """Counts of rows written by a sync."""

    league_id: UUID
    season_type: Optional[str] = None
    current_week: Optional[int] = None
    rosters_upserted: int = 0
    imported_weeks: list[int] = Field(default_factory=list)
    matchup_rows_upserted: int = 0
    projections_upserted: int = 0
    skipped: list[str] = Field(default_factory=list)
