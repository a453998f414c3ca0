"""League and membership database models."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from database.base import Base
from models.base import TimestampMixin, UUIDMixin, utcnow


class League(Base, UUIDMixin, TimestampMixin):
    """Fantasy league imported from a provider such as Sleeper."""

    __tablename__ = "leagues"

    name = Column(String(200), nullable=False)
    provider = Column(String(50), nullable=True, default="sleeper")
    # Provider-side league id used for API calls
    external_id = Column(String(100), nullable=True, index=True)
    season = Column(Integer, nullable=True)
    scoring_settings = Column(JSON, nullable=True)
    created_by = Column(Uuid(as_uuid=True), nullable=False)

    members = relationship(
        "LeagueMember",
        back_populates="league",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<League {self.name} ({self.external_id})>"


class LeagueMember(Base, UUIDMixin):
    """Membership of an application user in a league."""

    __tablename__ = "league_members"

    league_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leagues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    league = relationship("League", back_populates="members")

    __table_args__ = (
        UniqueConstraint("league_id", "user_id", name="uq_league_member"),
    )

    def __repr__(self) -> str:
        return f"<LeagueMember {self.user_id} in {self.league_id}>"
