"""
Unit Tests: Wager Descriptors, Offers and Acceptor Payout

Test cases:
- Descriptor parsing and formatting
- Opposite position, its round trip and its fallbacks
- Offer and counter-offer construction
- Acceptor risk/win/pot arithmetic
- Terms parsing for legacy rows
"""

from uuid import uuid4

import pytest

from models import Wager
from schemas import BetSide, CustomBetTerms, SpreadBetTerms, dump_terms, parse_terms
from services.descriptor import (
    format_descriptor,
    format_spread,
    mirror_descriptor,
    parse_descriptor,
)
from services.offer_builder import build_counter_offer, build_offer
from services.wager_service import get_acceptor_payout, get_opposite_position


# ============================================================================
# Descriptor grammar
# ============================================================================

def test_parse_descriptor() -> None:
    parsed = parse_descriptor("12 +3.5 vs 7")
    assert parsed.team == "12"
    assert parsed.spread == 3.5
    assert parsed.opponent == "7"


def test_parse_descriptor_with_team_names() -> None:
    parsed = parse_descriptor("The Gronk Squad -10 vs Team 4")
    assert parsed.team == "The Gronk Squad"
    assert parsed.spread == -10.0
    assert parsed.opponent == "Team 4"


@pytest.mark.parametrize("descriptor", ["", None, "12 3.5 vs 7", "Who scores more TDs?"])
def test_unparsable_descriptor(descriptor) -> None:
    assert parse_descriptor(descriptor) is None


def test_format_spread_never_prints_negative_zero() -> None:
    assert format_spread(-0.0) == "+0.0"
    assert format_spread(-0.04) == "+0.0"
    assert format_spread(2.25) == "+2.3"
    assert format_spread(-7) == "-7.0"


def test_format_descriptor() -> None:
    assert format_descriptor("12", 3.5, "7") == "12 +3.5 vs 7"


# ============================================================================
# Opposite position
# ============================================================================

def test_opposite_position_swaps_teams_and_negates_spread() -> None:
    assert get_opposite_position("12 +3.5 vs 7") == "7 -3.5 vs 12"
    assert get_opposite_position("7 -3.5 vs 12") == "12 +3.5 vs 7"


@pytest.mark.parametrize(
    "descriptor",
    ["12 +3 vs 7", "12 +3.25 vs 7", "12 -0.5 vs 7", "12 -10.75 vs 7", "Team A +0 vs Team B"],
)
def test_opposite_of_opposite_is_the_original(descriptor: str) -> None:
    assert get_opposite_position(get_opposite_position(descriptor)) == descriptor


def test_opposite_position_keeps_spread_digits() -> None:
    assert get_opposite_position("12 +3.25 vs 7") == "7 -3.25 vs 12"
    assert get_opposite_position("12 +3 vs 7") == "7 -3 vs 12"
    assert mirror_descriptor("Who scores more TDs?") is None


def test_opposite_position_falls_back_to_structured_spread() -> None:
    assert get_opposite_position("custom line", {"adjustedSpread": 4}) == "-4.0"


def test_opposite_position_returns_input_when_nothing_parses() -> None:
    assert get_opposite_position("Who scores more TDs?", {}) == "Who scores more TDs?"
    assert get_opposite_position("odd", {"adjustedSpread": True}) == "odd"


# ============================================================================
# Offers
# ============================================================================

def test_build_offer_for_side_b_negates_projected_spread() -> None:
    built = build_offer(
        spread=3.46, side=BetSide.B, roster_a=7, roster_b=12, week=5, season=2024
    )
    assert built.descriptor == "12 -3.5 vs 7"
    assert built.terms.team_roster_id == 12
    assert built.terms.opponent_roster_id == 7
    assert built.terms.original_spread == -3.5
    assert built.terms.adjusted_spread == -3.5
    assert built.terms.side is BetSide.B


def test_build_offer_with_override_and_team_names() -> None:
    built = build_offer(
        spread=3.5,
        side="A",
        roster_a=7,
        roster_b=12,
        week=5,
        season=2024,
        payout_ratio=1.5,
        spread_override=1,
        team_names={7: "Bob", 12: "Team 12"},
    )
    assert built.descriptor == "Bob +1.0 vs Team 12"
    assert built.terms.original_spread == 3.5
    assert built.terms.adjusted_spread == 1.0
    assert built.terms.payout_ratio == 1.5


def test_terms_are_persisted_in_camel_case() -> None:
    built = build_offer(
        spread=3.5, side=BetSide.A, roster_a=7, roster_b=12, week=5, season=2024,
        matchup_index=0,
    )
    stored = dump_terms(built.terms)
    assert stored["kind"] == "spread"
    assert stored["teamRosterId"] == 7
    assert stored["adjustedSpread"] == 3.5
    assert stored["payoutRatio"] == 2.0
    assert stored["matchupIndex"] == 0
    assert "counterTo" not in stored


def test_counter_offer_mirrors_the_original_line() -> None:
    original = build_offer(
        spread=-3.5, side=BetSide.B, roster_a=7, roster_b=12, week=5, season=2024
    ).terms
    original_id, creator = uuid4(), uuid4()

    built = build_counter_offer(
        original, original_bet_id=original_id, counter_to=creator, payout_ratio=3.0
    )
    assert built.descriptor == "7 -3.5 vs 12"
    assert built.terms.is_counter_offer is True
    assert built.terms.original_bet_id == original_id
    assert built.terms.counter_to == creator
    assert built.terms.side is BetSide.A
    assert built.terms.payout_ratio == 3.0


def test_counter_offer_with_explicit_spread() -> None:
    original = build_offer(
        spread=-3.5, side=BetSide.B, roster_a=7, roster_b=12, week=5, season=2024
    ).terms
    built = build_counter_offer(
        original, original_bet_id=uuid4(), counter_to=uuid4(), spread=-1.25
    )
    assert built.descriptor == "7 -1.2 vs 12"
    assert built.terms.original_spread == -3.5


def test_counter_offer_requires_rosters() -> None:
    with pytest.raises(ValueError):
        build_counter_offer(
            SpreadBetTerms(adjusted_spread=2.0),
            original_bet_id=uuid4(),
            counter_to=uuid4(),
        )


# ============================================================================
# Acceptor payout
# ============================================================================

def _wager(token_amount: int, terms: dict | None) -> Wager:
    return Wager(type="12 +3.5 vs 7", token_amount=token_amount, terms=terms)


def test_acceptor_payout_default_ratio() -> None:
    payout = get_acceptor_payout(_wager(10, None))
    assert payout.payout_ratio == 2.0
    assert payout.risk_amount == 20
    assert payout.win_amount == 10
    assert payout.total_pot == 30


@pytest.mark.parametrize(
    "amount, ratio, risk",
    [(10, 1.0, 10), (25, 1.5, 38), (7, 3.3, 23), (100, 5.0, 500)],
)
def test_acceptor_pot_is_risk_plus_win(amount: int, ratio: float, risk: int) -> None:
    payout = get_acceptor_payout(_wager(amount, {"payoutRatio": ratio}))
    # Risk is held in whole tokens, rounded half up
    assert payout.risk_amount == risk
    assert payout.win_amount == amount
    assert payout.total_pot == pytest.approx(payout.risk_amount + payout.win_amount)


# ============================================================================
# Terms parsing
# ============================================================================

def test_parse_terms_classifies_legacy_spread_rows() -> None:
    terms = parse_terms({"week": 5, "season": 2024, "adjustedSpread": 3.5})
    assert isinstance(terms, SpreadBetTerms)
    assert terms.adjusted_spread == 3.5


def test_parse_terms_reads_rows_without_kind_as_spread() -> None:
    terms = parse_terms({"week": 5, "season": 2024, "payoutRatio": 2.0})
    assert isinstance(terms, SpreadBetTerms)
    assert terms.team_roster_id is None


def test_parse_terms_custom_only_when_marked() -> None:
    assert isinstance(parse_terms({"kind": "custom", "week": 5}), CustomBetTerms)


def test_parse_terms_rejects_invalid_blob() -> None:
    assert parse_terms({"kind": "spread", "payoutRatio": 50}) is None
    assert parse_terms(None) is None
