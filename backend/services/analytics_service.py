"""Per-user betting record within a league."""

import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Wager
from schemas.analytics import BetAnalytics
from schemas.wager import BetOutcome, WagerStatus
from services.wager_service import acceptor_stake

logger = logging.getLogger(__name__)


def compute_bet_analytics(wagers: Iterable[Wager], user_id: UUID) -> BetAnalytics:
    """
    Aggregate a user's wagers into a betting record.

    Wagers are read oldest first, so ``current_streak`` reflects the most
    recent settled results: positive for consecutive wins, negative for
    consecutive losses, reset by a push. Win rate is a percentage of
    decided (won or lost) wagers. Winnings and losses are the stakes
    that change hands at settlement, so ``net_profit`` matches the
    ledger. Only wagers the user created count towards ``total_wagered``.
    """
    ordered = sorted(wagers, key=lambda w: w.created_at)
    analytics = BetAnalytics()
    if not ordered:
        return analytics

    analytics.total_bets = len(ordered)
    streak = 0
    best_streak = 0

    for wager in ordered:
        is_creator = wager.created_by == user_id
        is_acceptor = wager.accepted_by == user_id

        if wager.status == WagerStatus.SETTLED.value and wager.outcome:
            if wager.outcome == BetOutcome.PUSH.value:
                analytics.pushes += 1
                streak = 0
            elif is_creator or is_acceptor:
                creator_won = wager.outcome == BetOutcome.WON.value
                user_won = creator_won if is_creator else not creator_won
                # A winner nets the other side's stake; a loser forfeits its own
                own, other = wager.token_amount, acceptor_stake(wager)
                if not is_creator:
                    own, other = other, own
                if user_won:
                    analytics.wins += 1
                    analytics.total_won += other
                    analytics.largest_win = max(analytics.largest_win, other)
                    streak = max(streak, 0) + 1
                else:
                    analytics.losses += 1
                    analytics.total_lost += own
                    analytics.largest_loss = max(analytics.largest_loss, own)
                    streak = min(streak, 0) - 1
            best_streak = max(best_streak, abs(streak))

        if is_creator:
            analytics.total_wagered += wager.token_amount

    decided = analytics.wins + analytics.losses
    if decided:
        analytics.win_rate = analytics.wins / decided * 100
    analytics.net_profit = analytics.total_won - analytics.total_lost
    analytics.average_bet_size = analytics.total_wagered / analytics.total_bets
    analytics.current_streak = streak
    analytics.best_streak = best_streak
    return analytics


async def get_bet_analytics(
    db: AsyncSession,
    user_id: UUID,
    league_id: UUID,
) -> BetAnalytics:
    """Load the user's wagers in a league and aggregate them."""
    result = await db.execute(
        select(Wager)
        .where(Wager.league_id == league_id)
        .where(or_(Wager.created_by == user_id, Wager.accepted_by == user_id))
        .execution_options(populate_existing=True)
    )
    wagers = list(result.scalars().all())
    analytics = compute_bet_analytics(wagers, user_id)
    logger.debug(
        f"Analytics for {user_id} in {league_id}: "
        f"{analytics.wins}W-{analytics.losses}L-{analytics.pushes}P"
    )
    return analytics
