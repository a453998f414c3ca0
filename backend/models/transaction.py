"""Token transaction (audit trail) database model."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from database.base import Base
from models.base import UUIDMixin, utcnow


class TokenTransaction(Base, UUIDMixin):
    """Append-only ledger entry for a token movement."""

    __tablename__ = "transactions"

    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    league_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leagues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bet_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("bets.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    amount = Column(Integer, nullable=False)
    type = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    wager = relationship("Wager", back_populates="transactions")

    __table_args__ = (
        CheckConstraint(
            "type IN ('bet_placed', 'bet_accepted', 'payout_won', 'payout_lost')",
            name="valid_transaction_type",
        ),
    )

    def __repr__(self) -> str:
        return f"<TokenTransaction {self.type} {self.amount} -> {self.user_id}>"
