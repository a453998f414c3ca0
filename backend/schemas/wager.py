"""Wager Pydantic schemas and the structured terms payload."""

import logging
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import Field, TypeAdapter, ValidationError

from schemas.common import BaseSchema, CamelSchema

logger = logging.getLogger(__name__)

MIN_PAYOUT_RATIO = 1.0
MAX_PAYOUT_RATIO = 5.0
DEFAULT_PAYOUT_RATIO = 2.0


class WagerStatus(str, Enum):
    """Wager lifecycle: offered -> active -> settled."""

    OFFERED = "offered"
    ACTIVE = "active"
    SETTLED = "settled"


class BetSide(str, Enum):
    """Side of a matchup pair (A is the lower roster id)."""

    A = "A"
    B = "B"

    @property
    def opposite(self) -> "BetSide":
        return BetSide.B if self is BetSide.A else BetSide.A


class BetOutcome(str, Enum):
    """Outcome from the wager creator's point of view."""

    WON = "won"
    LOST = "lost"
    PUSH = "push"
    # Not a settlement outcome: the wager cannot be graded automatically
    UNRESOLVABLE = "unresolvable"


class TransactionType(str, Enum):
    """Ledger entry types."""

    BET_PLACED = "bet_placed"
    BET_ACCEPTED = "bet_accepted"
    PAYOUT_WON = "payout_won"
    PAYOUT_LOST = "payout_lost"


class MarketConditions(CamelSchema):
    """Inputs to the spread heuristic. Defaults are neutral."""

    bet_volume: float = 50.0
    acceptance_rate: float = 0.5
    time_until_game: float = 168.0  # hours
    team_popularity: float = 0.5


class _TermsBase(CamelSchema):
    """Keys shared by every terms variant, including settlement bookkeeping."""

    week: Optional[int] = None
    season: Optional[int] = None
    payout_ratio: float = Field(
        default=DEFAULT_PAYOUT_RATIO, ge=MIN_PAYOUT_RATIO, le=MAX_PAYOUT_RATIO
    )

    # Counter-offer linkage
    is_counter_offer: bool = False
    original_bet_id: Optional[UUID] = None
    counter_to: Optional[UUID] = None

    # Written by settlement
    game_result: Optional[dict[str, Any]] = None
    settlement_date: Optional[datetime] = None
    settlement_reason: Optional[str] = None
    needs_review: bool = False
    review_reason: Optional[str] = None


class SpreadBetTerms(_TermsBase):
    """Point-spread wager on one side of a league matchup."""

    kind: Literal["spread"] = "spread"
    matchup_index: Optional[int] = None
    side: BetSide = BetSide.A
    team_roster_id: Optional[int] = None
    opponent_roster_id: Optional[int] = None
    original_spread: Optional[float] = None
    adjusted_spread: Optional[float] = None
    optimal_spread: Optional[float] = None
    market_conditions: Optional[MarketConditions] = None


class CustomBetTerms(_TermsBase):
    """Free-text wager; graded by an admin, never automatically."""

    kind: Literal["custom"] = "custom"


WagerTerms = Annotated[
    Union[SpreadBetTerms, CustomBetTerms],
    Field(discriminator="kind"),
]

_terms_adapter: TypeAdapter[WagerTerms] = TypeAdapter(WagerTerms)


def parse_terms(raw: Optional[dict[str, Any]]) -> Optional[WagerTerms]:
    """
    Read a persisted terms blob.

    Rows written before terms carried a ``kind`` are read as spread
    terms; only an explicit ``kind: custom`` marks a free-text wager. A
    blob that does not validate yields None so callers fall back to the
    descriptor.
    """
    if not raw:
        return None

    data = dict(raw)
    data.setdefault("kind", "spread")

    try:
        return _terms_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning(f"Unreadable wager terms ({e.error_count()} errors): {raw}")
        return None


def dump_terms(terms: WagerTerms) -> dict[str, Any]:
    """Serialize terms for the JSON column (camelCase, no nulls)."""
    return terms.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# Requests
# ============================================================================


class OfferCreate(BaseSchema):
    """Offer a spread wager on one side of a matchup."""

    week: int = Field(ge=1)
    season: int
    matchup_index: int = Field(ge=0)
    side: BetSide
    token_amount: int = Field(ge=1)
    payout_ratio: float = Field(
        default=DEFAULT_PAYOUT_RATIO, ge=MIN_PAYOUT_RATIO, le=MAX_PAYOUT_RATIO
    )
    spread: Optional[float] = Field(
        default=None,
        description="Override for the spread applied to the chosen side",
    )
    hours_until_game: Optional[float] = Field(default=None, ge=0)


class CustomOfferCreate(BaseSchema):
    """Offer a free-text wager."""

    description: str = Field(min_length=1, max_length=500)
    token_amount: int = Field(ge=1)
    week: Optional[int] = Field(default=None, ge=1)
    season: Optional[int] = None
    payout_ratio: float = Field(
        default=DEFAULT_PAYOUT_RATIO, ge=MIN_PAYOUT_RATIO, le=MAX_PAYOUT_RATIO
    )


class CounterOfferCreate(BaseSchema):
    """Take the other side of an offered wager on new terms."""

    token_amount: int = Field(ge=1)
    payout_ratio: float = Field(
        default=DEFAULT_PAYOUT_RATIO, ge=MIN_PAYOUT_RATIO, le=MAX_PAYOUT_RATIO
    )
    spread: Optional[float] = Field(
        default=None,
        description="Spread for the counter side (defaults to the mirrored line)",
    )


# ============================================================================
# Responses
# ============================================================================


class WagerResponse(BaseSchema):
    """Wager response schema."""

    id: UUID
    league_id: UUID
    created_by: UUID
    accepted_by: Optional[UUID]
    type: str
    token_amount: int
    status: WagerStatus
    terms: Optional[dict[str, Any]]
    outcome: Optional[str]
    created_at: datetime
    accepted_at: Optional[datetime]
    settled_at: Optional[datetime]


class AcceptorPayout(BaseSchema):
    """What the accepting party risks and can win."""

    payout_ratio: float
    risk_amount: float
    win_amount: float
    total_pot: float


class OppositeView(BaseSchema):
    """The accepting party's view of a wager."""

    wager_id: UUID
    position: str
    payout: AcceptorPayout
