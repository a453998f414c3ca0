"""Pydantic schemas module."""

from schemas.analytics import BetAnalytics, TransactionResponse
from schemas.common import BaseSchema, CamelSchema, MessageResponse
from schemas.league import (
    LeagueCreate,
    LeagueResponse,
    MatchupPair,
    MatchupSpreadResponse,
    ProfileResponse,
    ProjectedSpread,
    ProjectionRow,
    RosterRow,
    SyncRequest,
    SyncResponse,
)
from schemas.settlement import (
    GameResultIn,
    GameResultResponse,
    GameStatus,
    ResolveWagerRequest,
    SettleBetsRequest,
    SettleBetsResponse,
    SettlementItemResult,
)
from schemas.wager import (
    AcceptorPayout,
    BetOutcome,
    BetSide,
    CounterOfferCreate,
    CustomBetTerms,
    CustomOfferCreate,
    MarketConditions,
    OfferCreate,
    OppositeView,
    SpreadBetTerms,
    TransactionType,
    WagerResponse,
    WagerStatus,
    WagerTerms,
    dump_terms,
    parse_terms,
)

__all__ = [
    # Common
    "BaseSchema",
    "CamelSchema",
    "MessageResponse",
    # Leagues
    "LeagueCreate",
    "LeagueResponse",
    "MatchupPair",
    "MatchupSpreadResponse",
    "ProfileResponse",
    "ProjectedSpread",
    "ProjectionRow",
    "RosterRow",
    "SyncRequest",
    "SyncResponse",
    # Wagers
    "AcceptorPayout",
    "BetOutcome",
    "BetSide",
    "CounterOfferCreate",
    "CustomBetTerms",
    "CustomOfferCreate",
    "MarketConditions",
    "OfferCreate",
    "OppositeView",
    "SpreadBetTerms",
    "TransactionType",
    "WagerResponse",
    "WagerStatus",
    "WagerTerms",
    "dump_terms",
    "parse_terms",
    # Settlement
    "GameResultIn",
    "GameResultResponse",
    "GameStatus",
    "ResolveWagerRequest",
    "SettleBetsRequest",
    "SettleBetsResponse",
    "SettlementItemResult",
    # Analytics
    "BetAnalytics",
    "TransactionResponse",
]
