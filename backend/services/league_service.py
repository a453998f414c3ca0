"""League membership and the roster/projection query layer."""

import logging
from collections import defaultdict
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import League, LeagueMember, PlayerProjection, SleeperMatchup, SleeperRoster
from schemas.league import (
    LeagueCreate,
    MatchupPair,
    MatchupSpreadResponse,
    ProjectionRow,
    RosterRow,
)
from schemas.wager import BetSide
from services.ledger_service import ledger_service
from services.spread_model import build_projection_lookup, calculate_spread
from utils.errors import AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)


class LeagueService:
    """
    Leagues, their members, and read access to the synced Sleeper tables.
    """

    # ========================================================================
    # Leagues and membership
    # ========================================================================

    async def create_league(
        self,
        db: AsyncSession,
        data: LeagueCreate,
        user_id: UUID,
    ) -> League:
        """Register a league; the creator joins it as owner."""
        league = League(
            name=data.name,
            provider="sleeper",
            external_id=data.external_id,
            season=data.season,
            scoring_settings=data.scoring_settings,
            created_by=user_id,
        )
        db.add(league)
        await db.flush()

        db.add(LeagueMember(league_id=league.id, user_id=user_id, role="owner"))
        await ledger_service.ensure_profile(db, user_id)
        await db.commit()
        await db.refresh(league)

        logger.info(f"Created league {league.name} ({league.external_id})")
        return league

    async def get_league(self, db: AsyncSession, league_id: UUID) -> Optional[League]:
        """Get a league by ID."""
        result = await db.execute(select(League).where(League.id == league_id))
        return result.scalar_one_or_none()

    async def require_league(self, db: AsyncSession, league_id: UUID) -> League:
        league = await self.get_league(db, league_id)
        if not league:
            raise NotFoundError(f"League {league_id} not found")
        return league

    async def list_user_leagues(self, db: AsyncSession, user_id: UUID) -> list[League]:
        """Leagues the user is a member of."""
        result = await db.execute(
            select(League)
            .join(LeagueMember, LeagueMember.league_id == League.id)
            .where(LeagueMember.user_id == user_id)
            .order_by(League.name)
        )
        return list(result.scalars().all())

    async def join_league(
        self,
        db: AsyncSession,
        league_id: UUID,
        user_id: UUID,
        display_name: Optional[str] = None,
    ) -> LeagueMember:
        """
        Add the user to a league and make sure they have a profile.

        Joining twice returns the existing membership.
        """
        await self.require_league(db, league_id)

        member = await self.get_membership(db, league_id, user_id)
        if member is None:
            member = LeagueMember(league_id=league_id, user_id=user_id)
            db.add(member)
            try:
                await db.flush()
            except IntegrityError:
                # Concurrent join of the same user
                await db.rollback()
                member = await self.get_membership(db, league_id, user_id)
                if member is None:
                    raise
            else:
                logger.info(f"User {user_id} joined league {league_id}")

        await ledger_service.ensure_profile(db, user_id, display_name)
        await db.commit()
        return member

    async def get_membership(
        self, db: AsyncSession, league_id: UUID, user_id: UUID
    ) -> Optional[LeagueMember]:
        result = await db.execute(
            select(LeagueMember)
            .where(LeagueMember.league_id == league_id)
            .where(LeagueMember.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def is_member(self, db: AsyncSession, league_id: UUID, user_id: UUID) -> bool:
        return await self.get_membership(db, league_id, user_id) is not None

    async def require_member(
        self, db: AsyncSession, league_id: UUID, user_id: UUID
    ) -> LeagueMember:
        """Raise AuthorizationError unless the user belongs to the league."""
        member = await self.get_membership(db, league_id, user_id)
        if member is None:
            await self.require_league(db, league_id)
            raise AuthorizationError("You are not a member of this league")
        return member

    # ========================================================================
    # Roster / projection queries
    # ========================================================================

    async def fetch_rosters(self, db: AsyncSession, league_id: UUID) -> list[RosterRow]:
        """Rosters of a league with their current starters."""
        result = await db.execute(
            select(SleeperRoster)
            .where(SleeperRoster.league_id == league_id)
            .order_by(SleeperRoster.roster_id)
        )
        return [
            RosterRow(
                roster_id=row.roster_id,
                starters=[str(p) for p in (row.starters or []) if p],
                owner_sleeper_user_id=row.owner_sleeper_user_id,
                owner_name=row.owner_name,
            )
            for row in result.scalars().all()
        ]

    async def fetch_projections(
        self, db: AsyncSession, week: int, season: int
    ) -> list[ProjectionRow]:
        """Projected points of every player for a week."""
        result = await db.execute(
            select(PlayerProjection.player_id, PlayerProjection.points)
            .where(PlayerProjection.week == week)
            .where(PlayerProjection.season == season)
        )
        return [
            ProjectionRow(player_id=player_id, projection_points=points or 0.0)
            for player_id, points in result.all()
        ]

    async def fetch_matchup_pairs(
        self, db: AsyncSession, league_id: UUID, week: int
    ) -> list[MatchupPair]:
        """
        Group a week's matchup rows into head-to-head pairs.

        Pairs are ordered by matchup_id and side A is the lower roster id.
        Rows without a matchup_id are byes and form single-sided pairs.
        """
        result = await db.execute(
            select(SleeperMatchup.matchup_id, SleeperMatchup.roster_id)
            .where(SleeperMatchup.league_id == league_id)
            .where(SleeperMatchup.week == week)
        )

        groups: dict[int, list[int]] = defaultdict(list)
        byes: list[int] = []
        for matchup_id, roster_id in result.all():
            if matchup_id is None:
                byes.append(roster_id)
            else:
                groups[matchup_id].append(roster_id)

        pairs = []
        for matchup_id in sorted(groups):
            roster_ids = sorted(groups[matchup_id])
            pairs.append(
                MatchupPair(
                    matchup_id=matchup_id,
                    roster_a=roster_ids[0],
                    roster_b=roster_ids[1] if len(roster_ids) > 1 else None,
                )
            )
        pairs.extend(MatchupPair(matchup_id=None, roster_a=r) for r in sorted(byes))
        return pairs

    async def get_matchup_spreads(
        self,
        db: AsyncSession,
        league_id: UUID,
        week: int,
        season: int,
    ) -> list[MatchupSpreadResponse]:
        """Projected totals and spread for every matchup of a week."""
        pairs = await self.fetch_matchup_pairs(db, league_id, week)
        if not pairs:
            return []

        rosters = {r.roster_id: r for r in await self.fetch_rosters(db, league_id)}
        lookup = build_projection_lookup(await self.fetch_projections(db, week, season))

        spreads = []
        for index, pair in enumerate(pairs):
            roster_a = rosters.get(pair.roster_a)
            roster_b = rosters.get(pair.roster_b) if pair.roster_b is not None else None
            projected = calculate_spread(
                roster_a.starters if roster_a else None,
                roster_b.starters if roster_b else None,
                lookup,
            )

            favored = None
            if projected.spread > 0:
                favored = BetSide.A
            elif projected.spread < 0:
                favored = BetSide.B

            spreads.append(
                MatchupSpreadResponse(
                    matchup_index=index,
                    matchup_id=pair.matchup_id,
                    week=week,
                    season=season,
                    roster_a=pair.roster_a,
                    roster_b=pair.roster_b,
                    team_a_name=roster_a.display_name if roster_a else f"Team {pair.roster_a}",
                    team_b_name=(
                        (roster_b.display_name if roster_b else f"Team {pair.roster_b}")
                        if pair.roster_b is not None
                        else None
                    ),
                    projected_a=projected.projected_a,
                    projected_b=projected.projected_b,
                    spread=projected.spread,
                    favored=favored,
                )
            )
        return spreads


# Singleton instance
league_service = LeagueService()
