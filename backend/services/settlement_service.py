"""Wager grading and settlement."""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol, Union
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import GameResult, Wager
from schemas.settlement import (
    GameResultIn,
    GameStatus,
    SettleBetsResponse,
    SettlementItemResult,
)
from schemas.wager import (
    BetOutcome,
    CustomBetTerms,
    SpreadBetTerms,
    TransactionType,
    WagerStatus,
    parse_terms,
)
from services.descriptor import parse_descriptor
from services.ledger_service import ledger_service
from services.league_service import league_service
from services.wager_service import acceptor_risk, acceptor_stake, payout_ratio_of
from utils.errors import InvalidWagerStateError, NotFoundError

logger = logging.getLogger(__name__)

SETTLED_OUTCOMES = {BetOutcome.WON.value, BetOutcome.LOST.value, BetOutcome.PUSH.value}

# Result line marker for a wager whose game is not final yet
PENDING = "pending"


class GameScore(Protocol):
    home_roster_id: int
    away_roster_id: int
    home_points: float
    away_points: float


def wager_position(wager: Wager) -> Optional[tuple[str, float]]:
    """
    Roster id (as a string) and spread backed by the wager creator.

    Structured terms win over the descriptor. Only terms explicitly marked
    custom, or a descriptor outside the grammar, leave the wager without
    a position.
    """
    terms = parse_terms(wager.terms)
    if isinstance(terms, CustomBetTerms):
        return None

    if (
        isinstance(terms, SpreadBetTerms)
        and terms.team_roster_id is not None
        and terms.adjusted_spread is not None
    ):
        return str(terms.team_roster_id), terms.adjusted_spread

    parsed = parse_descriptor(wager.type)
    if parsed is None:
        return None
    return parsed.team.strip(), parsed.spread


def calculate_bet_outcome(wager: Wager, game_result: GameScore) -> BetOutcome:
    """
    Grade a wager from the creator's side.

    The creator's team score plus the spread is compared with the
    opponent's score: higher wins, lower loses, equal pushes. A wager
    whose team is not in the game cannot be graded.
    """
    position = wager_position(wager)
    if position is None:
        return BetOutcome.UNRESOLVABLE
    team, spread = position

    if team == str(game_result.home_roster_id):
        team_points, opponent_points = game_result.home_points, game_result.away_points
    elif team == str(game_result.away_roster_id):
        team_points, opponent_points = game_result.away_points, game_result.home_points
    else:
        return BetOutcome.UNRESOLVABLE

    margin = round(team_points + spread - opponent_points, 6)
    if margin > 0:
        return BetOutcome.WON
    if margin < 0:
        return BetOutcome.LOST
    return BetOutcome.PUSH


def find_game_result(
    game_results: Iterable[Union[GameResult, GameResultIn]],
    roster_id: str,
) -> Optional[Union[GameResult, GameResultIn]]:
    """First final game that includes the roster."""
    for game in game_results:
        if GameStatus(game.status) is not GameStatus.FINAL:
            continue
        if roster_id in (str(game.home_roster_id), str(game.away_roster_id)):
            return game
    return None


def winning_payout(token_amount: int, payout_ratio: float) -> int:
    """Tokens credited to the winner: the whole pot, both escrowed stakes."""
    return token_amount + acceptor_risk(token_amount, payout_ratio)


def _game_snapshot(game: GameScore) -> dict:
    return {
        "homeRosterId": game.home_roster_id,
        "awayRosterId": game.away_roster_id,
        "homePoints": game.home_points,
        "awayPoints": game.away_points,
    }


class SettlementService:
    """
    Settles active wagers against final game results.

    A wager leaves ``active`` exactly once: the status change is a guarded
    UPDATE, so a second settlement attempt matches no row.
    """

    async def upsert_game_results(
        self,
        db: AsyncSession,
        league_id: UUID,
        week: int,
        season: int,
        game_results: list[GameResultIn],
    ) -> list[GameResult]:
        """
        Store incoming results and return every stored result of the week.

        A result already recorded as final is never overwritten.
        """
        existing_rows = await self.get_game_results(db, league_id, week, season)
        existing = {(g.home_roster_id, g.away_roster_id): g for g in existing_rows}

        for incoming in game_results:
            key = (incoming.home_roster_id, incoming.away_roster_id)
            stored = existing.get(key)
            if stored is None:
                stored = GameResult(
                    league_id=league_id,
                    week=week,
                    season=season,
                    home_roster_id=incoming.home_roster_id,
                    away_roster_id=incoming.away_roster_id,
                    home_points=incoming.home_points,
                    away_points=incoming.away_points,
                    status=incoming.status.value,
                )
                db.add(stored)
                existing[key] = stored
            elif stored.status == GameStatus.FINAL.value:
                if (stored.home_points, stored.away_points) != (
                    incoming.home_points,
                    incoming.away_points,
                ):
                    logger.warning(
                        f"Ignoring new score for final game {key} in week {week}: "
                        f"{incoming.home_points}-{incoming.away_points}"
                    )
            else:
                stored.home_points = incoming.home_points
                stored.away_points = incoming.away_points
                stored.status = incoming.status.value
                stored.recorded_at = datetime.now(timezone.utc)

        await db.flush()
        return list(existing.values())

    async def get_game_results(
        self,
        db: AsyncSession,
        league_id: UUID,
        week: int,
        season: int,
    ) -> list[GameResult]:
        """Stored results for a league week."""
        result = await db.execute(
            select(GameResult)
            .where(GameResult.league_id == league_id)
            .where(GameResult.week == week)
            .where(GameResult.season == season)
        )
        return list(result.scalars().all())

    async def get_active_wagers(
        self,
        db: AsyncSession,
        league_id: UUID,
        week: int,
        season: int,
    ) -> list[Wager]:
        """Active wagers of a league whose terms name the given week."""
        result = await db.execute(
            select(Wager)
            .where(Wager.league_id == league_id)
            .where(Wager.status == WagerStatus.ACTIVE.value)
            .order_by(Wager.created_at)
            .execution_options(populate_existing=True)
        )
        wagers = []
        for wager in result.scalars().all():
            terms = wager.terms or {}
            if terms.get("week") == week and terms.get("season") == season:
                wagers.append(wager)
        return wagers

    async def settle_bets(
        self,
        db: AsyncSession,
        league_id: UUID,
        week: int,
        season: int,
        game_results: list[GameResultIn],
    ) -> SettleBetsResponse:
        """
        Settle every active wager of a league week.

        Process:
        1. Upsert the supplied game results
        2. Load active wagers for the week
        3. Grade and settle each wager inside its own savepoint
        4. Collect per-wager outcomes and errors

        A failure on one wager is reported in its result line and does not
        stop the others.
        """
        await league_service.require_league(db, league_id)

        games = await self.upsert_game_results(db, league_id, week, season, game_results)
        await db.commit()

        wagers = await self.get_active_wagers(db, league_id, week, season)
        results: list[SettlementItemResult] = []
        settled_count = 0

        for wager in wagers:
            wager_id = wager.id
            try:
                async with db.begin_nested():
                    item = await self._settle_against_games(db, wager, games)
            except Exception as e:
                logger.error(f"Failed to settle wager {wager_id}: {e}")
                item = SettlementItemResult(bet_id=wager_id, error=str(e))

            if item.outcome in SETTLED_OUTCOMES:
                settled_count += 1
            results.append(item)

        await db.commit()

        logger.info(
            f"Settled {settled_count}/{len(wagers)} wagers for league {league_id} "
            f"week {week} ({season})"
        )
        return SettleBetsResponse(
            message=f"Settled {settled_count} bets",
            settled_count=settled_count,
            results=results,
        )

    async def _settle_against_games(
        self,
        db: AsyncSession,
        wager: Wager,
        games: list[GameResult],
    ) -> SettlementItemResult:
        position = wager_position(wager)
        if position is None:
            return await self._unresolvable(
                db, wager, None, "Wager terms cannot be graded automatically"
            )

        game = find_game_result(games, position[0])
        if game is None:
            return SettlementItemResult(
                bet_id=wager.id,
                outcome=PENDING,
                message="No final game result for this wager; left active",
            )

        outcome = calculate_bet_outcome(wager, game)
        if outcome is BetOutcome.UNRESOLVABLE:
            return await self._unresolvable(
                db, wager, game, "Wager team not found in game result"
            )

        return await self.settle_wager(
            db,
            wager,
            outcome,
            game=game,
            reason=f"Game result: {game.home_points}-{game.away_points}",
        )

    async def _unresolvable(
        self,
        db: AsyncSession,
        wager: Wager,
        game: Optional[GameResult],
        reason: str,
    ) -> SettlementItemResult:
        """Flag a wager for review, or push it when configured to."""
        if settings.sportsbook.unresolvable_as_push:
            return await self.settle_wager(
                db, wager, BetOutcome.PUSH, game=game, reason=f"Push - {reason}"
            )

        terms = dict(wager.terms or {})
        terms["needsReview"] = True
        terms["reviewReason"] = reason
        if game is not None:
            terms["gameResult"] = _game_snapshot(game)

        await db.execute(
            update(Wager)
            .where(Wager.id == wager.id)
            .where(Wager.status == WagerStatus.ACTIVE.value)
            .values(terms=terms)
            .execution_options(synchronize_session=False)
        )
        logger.warning(f"Wager {wager.id} needs manual review: {reason}")
        return SettlementItemResult(
            bet_id=wager.id,
            outcome=BetOutcome.UNRESOLVABLE.value,
            message=reason,
        )

    async def settle_wager(
        self,
        db: AsyncSession,
        wager: Wager,
        outcome: BetOutcome,
        game: Optional[GameScore] = None,
        reason: Optional[str] = None,
    ) -> SettlementItemResult:
        """
        Mark one active wager settled and pay out.

        Won or lost: the winner is credited the pot (token_amount plus the
        acceptor's token_amount * payoutRatio). Push: each party gets its own
        stake back. Does not commit.
        """
        outcome = BetOutcome(outcome)
        if outcome is BetOutcome.UNRESOLVABLE:
            raise ValueError("An unresolvable wager cannot be settled")

        now = datetime.now(timezone.utc)
        if reason is None and outcome is BetOutcome.PUSH:
            reason = "Push - bet returned to both parties"

        terms = dict(wager.terms or {})
        terms.pop("reviewReason", None)
        terms["needsReview"] = False
        terms["settlementDate"] = now.isoformat()
        if reason:
            terms["settlementReason"] = reason
        if game is not None:
            terms["gameResult"] = _game_snapshot(game)

        result = await db.execute(
            update(Wager)
            .where(Wager.id == wager.id)
            .where(Wager.status == WagerStatus.ACTIVE.value)
            .values(
                status=WagerStatus.SETTLED.value,
                outcome=outcome.value,
                settled_at=now,
                terms=terms,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InvalidWagerStateError(f"Wager {wager.id} is not active")

        if outcome is BetOutcome.PUSH:
            refunds = (
                (wager.created_by, wager.token_amount),
                (wager.accepted_by, acceptor_stake(wager)),
            )
            for user_id, stake in refunds:
                await ledger_service.post(
                    db,
                    user_id=user_id,
                    league_id=wager.league_id,
                    amount=stake,
                    type=TransactionType.PAYOUT_WON,
                    bet_id=wager.id,
                    description="Push - bet returned",
                )
            logger.info(f"Wager {wager.id} pushed; stakes returned to both parties")
            return SettlementItemResult(
                bet_id=wager.id,
                outcome=outcome.value,
                payout_amount=wager.token_amount,
                message=reason,
            )

        winner_id = wager.created_by if outcome is BetOutcome.WON else wager.accepted_by
        payout = winning_payout(wager.token_amount, payout_ratio_of(wager))
        await ledger_service.post(
            db,
            user_id=winner_id,
            league_id=wager.league_id,
            amount=payout,
            type=TransactionType.PAYOUT_WON,
            bet_id=wager.id,
            description=f"Won bet: {wager.type}",
        )
        logger.info(f"Wager {wager.id} {outcome.value}: {payout} tokens to {winner_id}")
        return SettlementItemResult(
            bet_id=wager.id,
            outcome=outcome.value,
            winner_id=winner_id,
            payout_amount=payout,
            message=reason,
        )

    async def resolve_wager(
        self,
        db: AsyncSession,
        wager_id: UUID,
        outcome: BetOutcome,
        reason: Optional[str] = None,
    ) -> SettlementItemResult:
        """Manually settle an active wager (used for flagged wagers)."""
        result = await db.execute(
            select(Wager)
            .where(Wager.id == wager_id)
            .execution_options(populate_existing=True)
        )
        wager = result.scalar_one_or_none()
        if not wager:
            raise NotFoundError(f"Wager {wager_id} not found")
        if wager.status != WagerStatus.ACTIVE.value:
            raise InvalidWagerStateError(
                f"Only active wagers can be resolved (status: {wager.status})"
            )

        try:
            item = await self.settle_wager(
                db, wager, outcome, reason=reason or "Resolved by admin"
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Manually resolved wager {wager_id} as {item.outcome}")
        return item


# Singleton instance
settlement_service = SettlementService()
