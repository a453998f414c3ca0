"""
Integration Tests: Wager Lifecycle (offer, accept, counter)

Runs the services against an in-memory SQLite database.

Test cases:
- League creation, joining and starting balances
- Matchup spreads with bye weeks
- Offer escrows the creator's stake
- Acceptance guards (own wager, already accepted, non-member, balance)
- Counter-offers
- Custom wagers
"""

import pytest
from sqlalchemy import select

from conftest import (
    ALICE,
    BOB,
    CAROL,
    OUTSIDER,
    SEASON,
    WEEK,
    active_wager,
    offer_on_roster_12,
)
from models import TokenTransaction
from schemas import (
    BetSide,
    CounterOfferCreate,
    CustomOfferCreate,
    OfferCreate,
    TransactionType,
)
from services import league_service, ledger_service, wager_service
from utils.errors import (
    AuthorizationError,
    InsufficientBalanceError,
    InvalidWagerStateError,
    NotFoundError,
    ValidationFailedError,
)


async def transactions_for(db, wager_id) -> list[TokenTransaction]:
    result = await db.execute(
        select(TokenTransaction)
        .where(TokenTransaction.bet_id == wager_id)
        .order_by(TokenTransaction.created_at)
    )
    return list(result.scalars().all())


# ============================================================================
# Leagues
# ============================================================================

async def test_members_start_with_initial_balance(db, league) -> None:
    for user_id in (ALICE, BOB, CAROL):
        assert await ledger_service.get_balance(db, user_id) == 1000

    bob = await ledger_service.get_profile(db, BOB)
    assert bob.display_name == "Bob"
    assert await league_service.is_member(db, league.id, ALICE)
    assert not await league_service.is_member(db, league.id, OUTSIDER)


async def test_joining_twice_keeps_one_membership(db, league) -> None:
    first = await league_service.join_league(db, league.id, BOB)
    second = await league_service.join_league(db, league.id, BOB)
    assert first.id == second.id
    assert await ledger_service.get_balance(db, BOB) == 1000


async def test_list_user_leagues(db, league) -> None:
    leagues = await league_service.list_user_leagues(db, CAROL)
    assert [lg.id for lg in leagues] == [league.id]
    assert await league_service.list_user_leagues(db, OUTSIDER) == []


async def test_matchup_spreads_include_byes(db, league) -> None:
    spreads = await league_service.get_matchup_spreads(db, league.id, WEEK, SEASON)
    assert len(spreads) == 2

    matchup, bye = spreads
    assert (matchup.roster_a, matchup.roster_b) == (7, 12)
    assert matchup.projected_a == 35.5
    assert matchup.projected_b == 32.0
    assert matchup.spread == 3.5
    assert matchup.favored is BetSide.A
    assert matchup.team_a_name == "Bob"
    assert matchup.team_b_name == "Team 12"

    assert bye.roster_a == 3
    assert bye.roster_b is None
    assert bye.team_b_name is None


async def test_spreads_for_unsynced_week_are_empty(db, league) -> None:
    assert await league_service.get_matchup_spreads(db, league.id, 9, SEASON) == []


# ============================================================================
# Offers
# ============================================================================

async def test_offer_escrows_creator_stake(db, league) -> None:
    wager = await offer_on_roster_12(db, league, token_amount=25)

    assert wager.status == "offered"
    assert wager.type == "12 +3.5 vs 7"
    assert wager.accepted_by is None
    assert wager.terms["teamRosterId"] == 12
    assert wager.terms["originalSpread"] == -3.5
    assert wager.terms["adjustedSpread"] == 3.5
    assert wager.terms["week"] == WEEK
    assert wager.terms["marketConditions"]["betVolume"] == 50.0
    assert await ledger_service.get_balance(db, ALICE) == 975

    [entry] = await transactions_for(db, wager.id)
    assert entry.type == TransactionType.BET_PLACED.value
    assert entry.amount == -25
    assert entry.user_id == ALICE


async def test_offer_without_override_uses_projected_spread(db, league) -> None:
    wager = await wager_service.create_offer(
        db,
        league.id,
        BOB,
        OfferCreate(
            week=WEEK, season=SEASON, matchup_index=0, side=BetSide.A, token_amount=5
        ),
    )
    assert wager.type == "7 +3.5 vs 12"


async def test_offer_on_bye_is_rejected(db, league) -> None:
    offer = OfferCreate(
        week=WEEK, season=SEASON, matchup_index=1, side=BetSide.A, token_amount=5
    )
    with pytest.raises(ValidationFailedError):
        await wager_service.create_offer(db, league.id, ALICE, offer)


async def test_offer_on_unknown_matchup_is_rejected(db, league) -> None:
    offer = OfferCreate(
        week=WEEK, season=SEASON, matchup_index=5, side=BetSide.A, token_amount=5
    )
    with pytest.raises(ValidationFailedError):
        await wager_service.create_offer(db, league.id, ALICE, offer)


async def test_offer_requires_membership(db, league) -> None:
    with pytest.raises(AuthorizationError):
        await offer_on_roster_12(db, league, creator=OUTSIDER)


async def test_offer_larger_than_balance_is_rejected(db, league) -> None:
    league_id = league.id
    with pytest.raises(InsufficientBalanceError):
        await offer_on_roster_12(db, league, token_amount=1001)

    # The failed insert is rolled back with the debit
    assert await ledger_service.get_balance(db, ALICE) == 1000
    assert await wager_service.list_wagers(db, league_id) == []


async def test_custom_offer(db, league) -> None:
    wager = await wager_service.create_custom_offer(
        db,
        league.id,
        CAROL,
        CustomOfferCreate(
            description="  Bob's kicker outscores my QB  ",
            token_amount=15,
            week=WEEK,
            season=SEASON,
        ),
    )
    assert wager.type == "Bob's kicker outscores my QB"
    assert wager.terms["kind"] == "custom"
    assert await ledger_service.get_balance(db, CAROL) == 985


# ============================================================================
# Acceptance
# ============================================================================

async def test_accept_escrows_acceptor_stake(db, league) -> None:
    wager = await active_wager(db, league, token_amount=10)

    assert wager.status == "active"
    assert wager.accepted_by == BOB
    assert wager.accepted_at is not None
    assert await ledger_service.get_balance(db, ALICE) == 990
    assert await ledger_service.get_balance(db, BOB) == 980

    placed, accepted = await transactions_for(db, wager.id)
    assert placed.type == TransactionType.BET_PLACED.value
    assert accepted.type == TransactionType.BET_ACCEPTED.value
    # 10 tokens at the default 2.0 ratio
    assert accepted.amount == -20
    assert accepted.description == "Accepted bet: 7 -3.5 vs 12"


async def test_cannot_accept_own_wager(db, league) -> None:
    wager = await offer_on_roster_12(db, league)
    with pytest.raises(AuthorizationError):
        await wager_service.accept_wager(db, wager.id, ALICE)


async def test_second_acceptor_is_rejected(db, league) -> None:
    wager = await active_wager(db, league)
    with pytest.raises(InvalidWagerStateError):
        await wager_service.accept_wager(db, wager.id, CAROL)

    assert await ledger_service.get_balance(db, CAROL) == 1000
    reloaded = await wager_service.get_wager(db, wager.id)
    assert reloaded.accepted_by == BOB


async def test_non_member_cannot_accept(db, league) -> None:
    wager = await offer_on_roster_12(db, league)
    with pytest.raises(AuthorizationError):
        await wager_service.accept_wager(db, wager.id, OUTSIDER)


async def test_accept_without_funds_leaves_wager_open(db, league) -> None:
    wager = await offer_on_roster_12(db, league, token_amount=600)
    wager_id = wager.id
    await offer_on_roster_12(db, league, creator=BOB, token_amount=500)

    with pytest.raises(InsufficientBalanceError):
        await wager_service.accept_wager(db, wager_id, BOB)

    reloaded = await wager_service.get_wager(db, wager_id)
    assert reloaded.status == "offered"
    assert reloaded.accepted_by is None
    assert await ledger_service.get_balance(db, BOB) == 500


async def test_accept_unknown_wager(db, league) -> None:
    with pytest.raises(NotFoundError):
        await wager_service.accept_wager(db, OUTSIDER, BOB)


# ============================================================================
# Counter-offers
# ============================================================================

async def test_counter_offer_takes_the_other_side(db, league) -> None:
    original = await offer_on_roster_12(db, league)

    counter = await wager_service.create_counter_offer(
        db,
        original.id,
        BOB,
        CounterOfferCreate(token_amount=20, payout_ratio=1.5),
    )
    assert counter.status == "offered"
    assert counter.created_by == BOB
    assert counter.type == "7 -3.5 vs 12"
    assert counter.terms["isCounterOffer"] is True
    assert counter.terms["originalBetId"] == str(original.id)
    assert counter.terms["counterTo"] == str(ALICE)
    assert counter.terms["payoutRatio"] == 1.5
    assert await ledger_service.get_balance(db, BOB) == 980

    # The original offer is untouched
    reloaded = await wager_service.get_wager(db, original.id)
    assert reloaded.status == "offered"


async def test_cannot_counter_own_or_accepted_wager(db, league) -> None:
    original = await offer_on_roster_12(db, league)
    with pytest.raises(AuthorizationError):
        await wager_service.create_counter_offer(
            db, original.id, ALICE, CounterOfferCreate(token_amount=5)
        )

    await wager_service.accept_wager(db, original.id, BOB)
    with pytest.raises(InvalidWagerStateError):
        await wager_service.create_counter_offer(
            db, original.id, CAROL, CounterOfferCreate(token_amount=5)
        )


async def test_custom_wagers_cannot_be_countered(db, league) -> None:
    custom = await wager_service.create_custom_offer(
        db, league.id, ALICE, CustomOfferCreate(description="Coin flip", token_amount=5)
    )
    with pytest.raises(ValidationFailedError):
        await wager_service.create_counter_offer(
            db, custom.id, BOB, CounterOfferCreate(token_amount=5)
        )


# ============================================================================
# Listing
# ============================================================================

async def test_list_wagers_filters(db, league) -> None:
    open_offer = await offer_on_roster_12(db, league, creator=CAROL)
    accepted = await active_wager(db, league)

    active = await wager_service.list_wagers(db, league.id, status="active")
    assert [w.id for w in active] == [accepted.id]

    mine = await wager_service.list_wagers(db, league.id, user_id=CAROL)
    assert [w.id for w in mine] == [open_offer.id]

    everything = await wager_service.list_wagers(db, league.id)
    assert {w.id for w in everything} == {open_offer.id, accepted.id}


async def test_opposite_view(db, league) -> None:
    wager = await offer_on_roster_12(db, league, token_amount=10, payout_ratio=1.5)
    view = wager_service.get_opposite_view(wager)
    assert view.position == "7 -3.5 vs 12"
    assert view.payout.risk_amount == 15
    assert view.payout.win_amount == 10
    assert view.payout.total_pot == 25
