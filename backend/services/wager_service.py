"""Wager offering, acceptance and counter-offers."""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import Wager
from schemas.wager import (
    AcceptorPayout,
    BetSide,
    CounterOfferCreate,
    CustomBetTerms,
    CustomOfferCreate,
    OfferCreate,
    OppositeView,
    SpreadBetTerms,
    TransactionType,
    WagerStatus,
    WagerTerms,
    dump_terms,
    parse_terms,
)
from services.descriptor import format_spread, mirror_descriptor
from services.ledger_service import ledger_service
from services.league_service import league_service
from services.market import compute_market_conditions
from services.offer_builder import build_counter_offer, build_offer
from utils.errors import (
    AuthorizationError,
    InvalidWagerStateError,
    NotFoundError,
    SportsbookError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


def get_opposite_position(descriptor: str, terms: Optional[dict[str, Any]] = None) -> str:
    """
    Describe the other side of a wager.

    "12 +3.5 vs 7" becomes "7 -3.5 vs 12", with the spread digits kept as
    written. When the descriptor does not follow the grammar, the negated
    structured spread is returned instead, and failing that the descriptor
    itself.
    """
    mirrored = mirror_descriptor(descriptor)
    if mirrored:
        return mirrored

    adjusted = (terms or {}).get("adjustedSpread")
    if isinstance(adjusted, (int, float)) and not isinstance(adjusted, bool):
        return format_spread(-adjusted)

    return descriptor


def payout_ratio_of(wager: Wager) -> float:
    """Payout ratio stored on the wager terms, or the configured default."""
    ratio = (wager.terms or {}).get("payoutRatio")
    if isinstance(ratio, (int, float)) and not isinstance(ratio, bool) and ratio > 0:
        return float(ratio)
    return settings.sportsbook.default_payout_ratio


def acceptor_risk(token_amount: int, payout_ratio: float) -> int:
    """Whole tokens the acceptor stakes: token_amount * ratio, rounded half up."""
    return int(math.floor(token_amount * payout_ratio + 0.5))


def acceptor_stake(wager: Wager) -> int:
    return acceptor_risk(wager.token_amount, payout_ratio_of(wager))


def get_acceptor_payout(wager: Wager) -> AcceptorPayout:
    """
    What the accepting party risks and wins.

    The acceptor risks what the creator could win (token_amount * ratio,
    in whole tokens) and wins what the creator risked (token_amount).
    The pot is both stakes, which is what the winner is paid.
    """
    risk = float(acceptor_stake(wager))
    win = float(wager.token_amount)
    return AcceptorPayout(
        payout_ratio=payout_ratio_of(wager),
        risk_amount=risk,
        win_amount=win,
        total_pot=risk + win,
    )


class WagerService:
    """
    Handles the offered -> active part of the wager lifecycle.

    Every stake is escrowed from the staking user when it is placed.
    """

    async def get_wager(self, db: AsyncSession, wager_id: UUID) -> Optional[Wager]:
        """Get a wager by ID."""
        result = await db.execute(
            select(Wager)
            .where(Wager.id == wager_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def require_wager(self, db: AsyncSession, wager_id: UUID) -> Wager:
        wager = await self.get_wager(db, wager_id)
        if not wager:
            raise NotFoundError(f"Wager {wager_id} not found")
        return wager

    async def list_wagers(
        self,
        db: AsyncSession,
        league_id: UUID,
        status: Optional[WagerStatus] = None,
        user_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> list[Wager]:
        """Wagers of a league, newest first."""
        query = select(Wager).where(Wager.league_id == league_id)
        if status is not None:
            query = query.where(Wager.status == WagerStatus(status).value)
        if user_id is not None:
            query = query.where(
                (Wager.created_by == user_id) | (Wager.accepted_by == user_id)
            )
        query = (
            query.order_by(Wager.created_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_review_wagers(
        self,
        db: AsyncSession,
        league_id: Optional[UUID] = None,
    ) -> list[Wager]:
        """Active wagers that settlement flagged for manual review."""
        query = select(Wager).where(Wager.status == WagerStatus.ACTIVE.value)
        if league_id is not None:
            query = query.where(Wager.league_id == league_id)
        result = await db.execute(
            query.order_by(Wager.created_at).execution_options(populate_existing=True)
        )
        return [
            wager
            for wager in result.scalars().all()
            if (wager.terms or {}).get("needsReview")
        ]

    def get_opposite_view(self, wager: Wager) -> OppositeView:
        return OppositeView(
            wager_id=wager.id,
            position=get_opposite_position(wager.type, wager.terms),
            payout=get_acceptor_payout(wager),
        )

    # ========================================================================
    # Offers
    # ========================================================================

    async def create_offer(
        self,
        db: AsyncSession,
        league_id: UUID,
        user_id: UUID,
        offer: OfferCreate,
    ) -> Wager:
        """
        Offer a spread wager on one side of a projected matchup.

        Process:
        1. Check league membership
        2. Look up the matchup's projected spread
        3. Build descriptor and terms with current market conditions
        4. Escrow the stake and insert the wager
        """
        await league_service.require_member(db, league_id, user_id)

        spreads = await league_service.get_matchup_spreads(
            db, league_id, offer.week, offer.season
        )
        if offer.matchup_index >= len(spreads):
            raise ValidationFailedError(
                f"No matchup {offer.matchup_index} in week {offer.week}"
            )
        matchup = spreads[offer.matchup_index]
        if matchup.roster_b is None:
            raise ValidationFailedError("Cannot wager on a bye week")

        team = matchup.roster_a if offer.side is BetSide.A else matchup.roster_b
        conditions = await compute_market_conditions(
            db,
            league_id,
            offer.week,
            offer.season,
            roster_id=team,
            hours_until_game=offer.hours_until_game,
        )

        built = build_offer(
            spread=matchup.spread,
            side=offer.side,
            roster_a=matchup.roster_a,
            roster_b=matchup.roster_b,
            week=offer.week,
            season=offer.season,
            payout_ratio=offer.payout_ratio,
            matchup_index=offer.matchup_index,
            market_conditions=conditions,
            spread_override=offer.spread,
        )
        return await self._place(
            db, league_id, user_id, built.descriptor, offer.token_amount, built.terms
        )

    async def create_custom_offer(
        self,
        db: AsyncSession,
        league_id: UUID,
        user_id: UUID,
        offer: CustomOfferCreate,
    ) -> Wager:
        """Offer a free-text wager that an admin grades after the game."""
        await league_service.require_member(db, league_id, user_id)

        terms = CustomBetTerms(
            week=offer.week,
            season=offer.season,
            payout_ratio=offer.payout_ratio,
        )
        return await self._place(
            db, league_id, user_id, offer.description.strip(), offer.token_amount, terms
        )

    async def create_counter_offer(
        self,
        db: AsyncSession,
        wager_id: UUID,
        user_id: UUID,
        counter: CounterOfferCreate,
    ) -> Wager:
        """
        Offer the other side of an open wager on new terms.

        The original wager is left untouched; the counter is a new offered
        wager linked to it through originalBetId and counterTo.
        """
        original = await self.require_wager(db, wager_id)
        await league_service.require_member(db, original.league_id, user_id)

        if original.created_by == user_id:
            raise AuthorizationError("You cannot counter your own wager")
        if original.status != WagerStatus.OFFERED.value:
            raise InvalidWagerStateError(
                f"Only offered wagers can be countered (status: {original.status})"
            )

        terms = parse_terms(original.terms)
        if not isinstance(terms, SpreadBetTerms) or terms.team_roster_id is None:
            raise ValidationFailedError("Only spread wagers can be countered")

        built = build_counter_offer(
            terms,
            original_bet_id=original.id,
            counter_to=original.created_by,
            payout_ratio=counter.payout_ratio,
            spread=counter.spread,
        )
        wager = await self._place(
            db,
            original.league_id,
            user_id,
            built.descriptor,
            counter.token_amount,
            built.terms,
        )
        logger.info(f"Counter-offer {wager.id} against {original.id}")
        return wager

    async def _place(
        self,
        db: AsyncSession,
        league_id: UUID,
        user_id: UUID,
        descriptor: str,
        token_amount: int,
        terms: WagerTerms,
    ) -> Wager:
        """Escrow the creator's stake and insert an offered wager."""
        try:
            wager = Wager(
                league_id=league_id,
                created_by=user_id,
                type=descriptor,
                token_amount=token_amount,
                status=WagerStatus.OFFERED.value,
                terms=dump_terms(terms),
            )
            db.add(wager)
            await db.flush()

            await ledger_service.post(
                db,
                user_id=user_id,
                league_id=league_id,
                amount=-token_amount,
                type=TransactionType.BET_PLACED,
                bet_id=wager.id,
                description=f"Offered bet: {descriptor}",
                require_funds=True,
            )
            await db.commit()
        except SportsbookError:
            await db.rollback()
            raise

        await db.refresh(wager)
        logger.info(f"Offered wager {wager.id}: {descriptor} for {token_amount} tokens")
        return wager

    # ========================================================================
    # Acceptance
    # ========================================================================

    async def accept_wager(
        self,
        db: AsyncSession,
        wager_id: UUID,
        user_id: UUID,
    ) -> Wager:
        """
        Take the other side of an offered wager.

        Process:
        1. Check league membership and that the wager is not the user's own
        2. Flip offered -> active with a guarded UPDATE (first acceptor wins)
        3. Escrow the acceptor's stake (token_amount * payoutRatio)
        """
        wager = await self.require_wager(db, wager_id)
        await league_service.require_member(db, wager.league_id, user_id)

        if wager.created_by == user_id:
            raise AuthorizationError("You cannot accept your own wager")
        if wager.status != WagerStatus.OFFERED.value:
            raise InvalidWagerStateError(
                f"Wager {wager_id} is no longer open (status: {wager.status})"
            )

        try:
            result = await db.execute(
                update(Wager)
                .where(Wager.id == wager_id)
                .where(Wager.status == WagerStatus.OFFERED.value)
                .values(
                    status=WagerStatus.ACTIVE.value,
                    accepted_by=user_id,
                    accepted_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise InvalidWagerStateError(f"Wager {wager_id} was already accepted")

            await ledger_service.post(
                db,
                user_id=user_id,
                league_id=wager.league_id,
                amount=-acceptor_stake(wager),
                type=TransactionType.BET_ACCEPTED,
                bet_id=wager.id,
                description=f"Accepted bet: {get_opposite_position(wager.type, wager.terms)}",
                require_funds=True,
            )
            await db.commit()
        except SportsbookError:
            await db.rollback()
            raise

        await db.refresh(wager)
        logger.info(f"User {user_id} accepted wager {wager_id}")
        return wager


# Singleton instance
wager_service = WagerService()
