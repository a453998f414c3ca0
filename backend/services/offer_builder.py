"""Turns a side selection on a matchup into a wager descriptor and terms."""

from typing import NamedTuple, Optional
from uuid import UUID

from schemas.wager import (
    DEFAULT_PAYOUT_RATIO,
    BetSide,
    MarketConditions,
    SpreadBetTerms,
)
from services.descriptor import format_descriptor, round_to_tenth
from services.market import calculate_optimal_spread


class BuiltOffer(NamedTuple):
    descriptor: str
    terms: SpreadBetTerms


def side_spread(spread: float, side: BetSide) -> float:
    """Spread applied to the chosen side: as-is for A, negated for B."""
    return spread if side is BetSide.A else -spread


def build_offer(
    *,
    spread: float,
    side: BetSide,
    roster_a: int,
    roster_b: int,
    week: int,
    season: int,
    payout_ratio: float = DEFAULT_PAYOUT_RATIO,
    matchup_index: Optional[int] = None,
    market_conditions: Optional[MarketConditions] = None,
    spread_override: Optional[float] = None,
    team_names: Optional[dict[int, str]] = None,
) -> BuiltOffer:
    """
    Build the descriptor and terms for a spread wager.

    Args:
        spread: Projected spread of the matchup from side A's perspective
        side: Side the offering user backs
        roster_a / roster_b: Roster ids of the matchup pair
        spread_override: Spread the user chose instead of the projection

    Returns:
        BuiltOffer with a descriptor such as "12 +3.5 vs 7" and the terms.
    """
    side = BetSide(side)
    team, opponent = (roster_a, roster_b) if side is BetSide.A else (roster_b, roster_a)
    names = team_names or {}

    original = round_to_tenth(side_spread(spread, side))
    optimal = calculate_optimal_spread(original, market_conditions)
    adjusted = round_to_tenth(spread_override) if spread_override is not None else original

    terms = SpreadBetTerms(
        matchup_index=matchup_index,
        side=side,
        week=week,
        season=season,
        team_roster_id=team,
        opponent_roster_id=opponent,
        original_spread=original,
        adjusted_spread=adjusted,
        optimal_spread=optimal,
        payout_ratio=payout_ratio,
        market_conditions=market_conditions,
    )
    descriptor = format_descriptor(
        names.get(team, str(team)),
        adjusted,
        names.get(opponent, str(opponent)),
    )
    return BuiltOffer(descriptor=descriptor, terms=terms)


def build_counter_offer(
    original: SpreadBetTerms,
    *,
    original_bet_id: UUID,
    counter_to: UUID,
    payout_ratio: float = DEFAULT_PAYOUT_RATIO,
    spread: Optional[float] = None,
    team_names: Optional[dict[int, str]] = None,
) -> BuiltOffer:
    """
    Build the opposite side of an existing spread wager.

    Without an explicit spread the counter takes the mirrored line of the
    original (same handicap, other team).
    """
    if original.team_roster_id is None or original.opponent_roster_id is None:
        raise ValueError("Original wager has no roster ids to counter")

    base_spread = original.adjusted_spread
    if base_spread is None:
        base_spread = original.original_spread or 0.0
    mirrored = -base_spread
    adjusted = round_to_tenth(spread) if spread is not None else round_to_tenth(mirrored)

    team = original.opponent_roster_id
    opponent = original.team_roster_id
    names = team_names or {}

    terms = SpreadBetTerms(
        matchup_index=original.matchup_index,
        side=original.side.opposite,
        week=original.week,
        season=original.season,
        team_roster_id=team,
        opponent_roster_id=opponent,
        original_spread=round_to_tenth(mirrored),
        adjusted_spread=adjusted,
        optimal_spread=calculate_optimal_spread(
            round_to_tenth(mirrored), original.market_conditions
        ),
        payout_ratio=payout_ratio,
        market_conditions=original.market_conditions,
        is_counter_offer=True,
        original_bet_id=original_bet_id,
        counter_to=counter_to,
    )
    descriptor = format_descriptor(
        names.get(team, str(team)),
        adjusted,
        names.get(opponent, str(opponent)),
    )
    return BuiltOffer(descriptor=descriptor, terms=terms)
