"""Game result database model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)

from database.base import Base
from models.base import UUIDMixin, utcnow


class GameResult(Base, UUIDMixin):
    """Final (or in-progress) score of one matchup, used to settle wagers."""

    __tablename__ = "game_results"

    league_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leagues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    week = Column(Integer, nullable=False)
    season = Column(Integer, nullable=False)
    home_roster_id = Column(Integer, nullable=False)
    away_roster_id = Column(Integer, nullable=False)
    home_points = Column(Float, nullable=False, default=0.0)
    away_points = Column(Float, nullable=False, default=0.0)
    status = Column(String(10), nullable=False, default="final")
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint(
            "league_id",
            "week",
            "season",
            "home_roster_id",
            "away_roster_id",
            name="uq_game_result_matchup",
        ),
        CheckConstraint(
            "status IN ('scheduled', 'live', 'final')",
            name="valid_game_status",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<GameResult wk{self.week} {self.home_roster_id} {self.home_points}"
            f" - {self.away_points} {self.away_roster_id} ({self.status})>"
        )
