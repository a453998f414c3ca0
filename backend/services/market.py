"""Market heuristic for suggesting a spread, and the inputs it needs."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import Wager
from schemas.wager import MarketConditions, WagerStatus, parse_terms
from services.descriptor import round_to_tenth

logger = logging.getLogger(__name__)


def calculate_optimal_spread(
    original_spread: float,
    conditions: Optional[MarketConditions] = None,
) -> float:
    """
    Adjust a spread for coarse market conditions.

    Advisory only: the offering user may override it and settlement
    never reads it.

    Adjustments:
        bet volume > 100: +0.5, < 20: -0.5
        acceptance rate < 0.3: -0.5, > 0.7: +0.5
        under 24 hours to kickoff: halve the adjustment so far
        team popularity > 0.8: +0.3
    """
    conditions = conditions or MarketConditions()
    adjustment = 0.0

    if conditions.bet_volume > 100:
        adjustment += 0.5
    elif conditions.bet_volume < 20:
        adjustment -= 0.5

    if conditions.acceptance_rate < 0.3:
        adjustment -= 0.5
    elif conditions.acceptance_rate > 0.7:
        adjustment += 0.5

    if conditions.time_until_game < 24:
        adjustment *= 0.5

    if conditions.team_popularity > 0.8:
        adjustment += 0.3

    return round_to_tenth(original_spread + adjustment)


async def compute_market_conditions(
    db: AsyncSession,
    league_id: UUID,
    week: int,
    season: int,
    roster_id: Optional[int] = None,
    hours_until_game: Optional[float] = None,
) -> MarketConditions:
    """
    Derive market conditions from the league's wagers for a week.

    Without any wager history the neutral defaults are returned.
    """
    if hours_until_game is None:
        hours_until_game = settings.sportsbook.default_hours_until_game

    result = await db.execute(select(Wager).where(Wager.league_id == league_id))
    week_wagers = []
    for wager in result.scalars().all():
        terms = parse_terms(wager.terms)
        if terms is not None and terms.week == week and terms.season == season:
            week_wagers.append((wager, terms))

    if not week_wagers:
        return MarketConditions(time_until_game=hours_until_game)

    volume = len(week_wagers)
    accepted = sum(
        1 for wager, _ in week_wagers if wager.status != WagerStatus.OFFERED.value
    )

    popularity = 0.5
    if roster_id is not None:
        naming = sum(
            1
            for _, terms in week_wagers
            if roster_id in (
                getattr(terms, "team_roster_id", None),
                getattr(terms, "opponent_roster_id", None),
            )
        )
        popularity = naming / volume

    conditions = MarketConditions(
        bet_volume=float(volume),
        acceptance_rate=accepted / volume,
        time_until_game=hours_until_game,
        team_popularity=popularity,
    )
    logger.debug(f"Market conditions for league {league_id} wk{week}: {conditions}")
    return conditions
