"""Wager database model."""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from database.base import Base
from models.base import UUIDMixin, utcnow


class Wager(Base, UUIDMixin):
    """Peer-to-peer token wager on a league matchup."""

    __tablename__ = "bets"

    league_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leagues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by = Column(Uuid(as_uuid=True), nullable=False, index=True)
    accepted_by = Column(Uuid(as_uuid=True), nullable=True, index=True)

    # Display descriptor, e.g. "12 +3.5 vs 7"
    type = Column(Text, nullable=False)
    token_amount = Column(Integer, nullable=False)
    status = Column(String(10), nullable=False, default="offered")
    terms = Column(JSON, nullable=True)
    outcome = Column(String(10), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    settled_at = Column(DateTime(timezone=True), nullable=True)

    transactions = relationship(
        "TokenTransaction",
        back_populates="wager",
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('offered', 'active', 'settled')",
            name="valid_bet_status",
        ),
        CheckConstraint(
            "outcome IS NULL OR outcome IN ('won', 'lost', 'push')",
            name="valid_bet_outcome",
        ),
        CheckConstraint("token_amount > 0", name="positive_token_amount"),
        CheckConstraint(
            "(status = 'offered' AND accepted_by IS NULL) OR "
            "(status <> 'offered' AND accepted_by IS NOT NULL)",
            name="accepted_by_matches_status",
        ),
        CheckConstraint(
            "(status = 'settled') = (outcome IS NOT NULL)",
            name="outcome_matches_status",
        ),
        Index("idx_bets_league_status", "league_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Wager {self.type!r} {self.token_amount} tokens ({self.status})>"
