"""Sleeper snapshot tables: rosters, weekly matchups and player projections."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)

from database.base import Base
from models.base import utcnow


class SleeperRoster(Base):
    """Current roster of one team in a league."""

    __tablename__ = "sleeper_rosters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leagues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    roster_id = Column(Integer, nullable=False)
    owner_sleeper_user_id = Column(String(50), nullable=True)
    owner_name = Column(String(100), nullable=True)
    starters = Column(JSON, nullable=True)
    players = Column(JSON, nullable=True)
    settings = Column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint("league_id", "roster_id", name="uq_sleeper_roster"),
    )

    def __repr__(self) -> str:
        return f"<SleeperRoster {self.roster_id} in {self.league_id}>"


class SleeperMatchup(Base):
    """One roster's side of a weekly head-to-head matchup."""

    __tablename__ = "sleeper_matchups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leagues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    week = Column(Integer, nullable=False)
    roster_id = Column(Integer, nullable=False)
    matchup_id = Column(Integer, nullable=True)
    points = Column(Float, nullable=True)
    starters = Column(JSON, nullable=True)
    players = Column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint("league_id", "week", "roster_id", name="uq_sleeper_matchup"),
    )

    def __repr__(self) -> str:
        return f"<SleeperMatchup wk{self.week} roster {self.roster_id} ({self.matchup_id})>"


class PlayerProjection(Base):
    """Projected fantasy points for a player in a given week."""

    __tablename__ = "player_projections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(String(20), nullable=False, index=True)
    season = Column(Integer, nullable=False)
    week = Column(Integer, nullable=False)
    points = Column(Float, nullable=False, default=0.0)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("player_id", "season", "week", name="uq_player_projection"),
    )

    def __repr__(self) -> str:
        return f"<PlayerProjection {self.player_id} {self.season}/{self.week}: {self.points}>"
