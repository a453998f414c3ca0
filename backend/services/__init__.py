"""Services module."""

from services.analytics_service import compute_bet_analytics, get_bet_analytics
from services.league_service import league_service
from services.ledger_service import ledger_service
from services.settlement_service import calculate_bet_outcome, settlement_service
from services.sync_service import SyncService
from services.wager_service import (
    get_acceptor_payout,
    get_opposite_position,
    wager_service,
)

__all__ = [
    "calculate_bet_outcome",
    "compute_bet_analytics",
    "get_acceptor_payout",
    "get_bet_analytics",
    "get_opposite_position",
    "league_service",
    "ledger_service",
    "settlement_service",
    "wager_service",
    "SyncService",
]
