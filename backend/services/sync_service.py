"""Copies Sleeper rosters, matchups and projections into local tables."""

import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import League, PlayerProjection, SleeperMatchup, SleeperRoster
from models.base import utcnow
from schemas.league import SyncRequest, SyncResponse
from services.league_service import league_service
from services.sleeper import NflState, SleeperClient
from utils.errors import ValidationFailedError

logger = logging.getLogger(__name__)

# Default PPR scoring
DEFAULT_SCORING: dict[str, float] = {
    "pass_yd": 0.04,
    "pass_td": 4,
    "pass_int": -2,
    "rush_yd": 0.1,
    "rush_td": 6,
    "rec": 1,
    "rec_yd": 0.1,
    "rec_td": 6,
    "fumble_lost": -2,
    "pass_2pt": 2,
    "rush_2pt": 2,
    "rec_2pt": 2,
}


def calculate_fantasy_points(
    stats: Mapping[str, Any],
    scoring: Optional[Mapping[str, float]] = None,
) -> float:
    """Score a projected stat line, rounded to two decimals."""
    scoring = scoring or DEFAULT_SCORING
    points = 0.0
    for stat, value in stats.items():
        multiplier = scoring.get(stat)
        if not multiplier or isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        points += value * multiplier
    return round(points, 2)


def default_sync_weeks(state: NflState) -> list[int]:
    """Weeks 1..current during the regular season, otherwise none."""
    if not state.is_regular_season:
        return []
    return list(range(1, state.week + 1))


class SyncService:
    """
    Upserts Sleeper data for one league through a SleeperClient.
    """

    def __init__(self, client: SleeperClient):
        self.client = client

    async def _require_external_id(self, db: AsyncSession, league_id: UUID) -> League:
        league = await league_service.require_league(db, league_id)
        if not league.external_id:
            raise ValidationFailedError(f"League {league_id} has no Sleeper league id")
        return league

    async def sync_rosters(self, db: AsyncSession, league_id: UUID) -> int:
        """Upsert every roster of the league with its owner's name."""
        league = await self._require_external_id(db, league_id)
        rosters = await self.client.get_league_rosters(league.external_id)
        users = {u.user_id: u for u in await self.client.get_league_users(league.external_id)}

        result = await db.execute(
            select(SleeperRoster).where(SleeperRoster.league_id == league_id)
        )
        existing = {row.roster_id: row for row in result.scalars().all()}

        for roster in rosters:
            owner = users.get(roster.owner_id) if roster.owner_id else None
            row = existing.get(roster.roster_id)
            if row is None:
                row = SleeperRoster(league_id=league_id, roster_id=roster.roster_id)
                db.add(row)
            row.owner_sleeper_user_id = roster.owner_id
            row.owner_name = owner.name if owner else None
            row.starters = roster.starters
            row.players = roster.players
            row.settings = roster.settings

        await db.commit()
        logger.info(f"Synced {len(rosters)} rosters for league {league.name}")
        return len(rosters)

    async def sync_matchups(
        self,
        db: AsyncSession,
        league_id: UUID,
        weeks: list[int],
    ) -> tuple[list[int], int]:
        """
        Upsert matchup rows for the given weeks.

        Weeks that come back empty are skipped.

        Returns:
            (imported weeks, rows upserted)
        """
        league = await self._require_external_id(db, league_id)
        imported: list[int] = []
        upserted = 0

        for week in weeks:
            matchups = await self.client.get_matchups(league.external_id, week)
            if not matchups:
                logger.info(f"Week {week} returned no matchups; skipping")
                continue

            result = await db.execute(
                select(SleeperMatchup)
                .where(SleeperMatchup.league_id == league_id)
                .where(SleeperMatchup.week == week)
            )
            existing = {row.roster_id: row for row in result.scalars().all()}

            for matchup in matchups:
                row = existing.get(matchup.roster_id)
                if row is None:
                    row = SleeperMatchup(
                        league_id=league_id, week=week, roster_id=matchup.roster_id
                    )
                    db.add(row)
                row.matchup_id = matchup.matchup_id
                row.points = matchup.points
                row.starters = matchup.starters
                row.players = matchup.players
                upserted += 1

            imported.append(week)

        await db.commit()
        logger.info(f"Synced matchups for weeks {imported} ({upserted} rows)")
        return imported, upserted

    async def sync_projections(
        self,
        db: AsyncSession,
        league_id: UUID,
        season: int,
        week: int,
    ) -> int:
        """Score and upsert every player's projection for a week."""
        league = await league_service.require_league(db, league_id)
        scoring = league.scoring_settings or DEFAULT_SCORING
        raw = await self.client.get_projections(season, week)

        result = await db.execute(
            select(PlayerProjection)
            .where(PlayerProjection.season == season)
            .where(PlayerProjection.week == week)
        )
        existing = {row.player_id: row for row in result.scalars().all()}

        for player_id, stats in raw.items():
            points = calculate_fantasy_points(stats, scoring)
            row = existing.get(player_id)
            if row is None:
                db.add(
                    PlayerProjection(
                        player_id=player_id, season=season, week=week, points=points
                    )
                )
            else:
                row.points = points
                row.updated_at = utcnow()

        await db.commit()
        logger.info(f"Synced {len(raw)} projections for {season} week {week}")
        return len(raw)

    async def sync_league(
        self,
        db: AsyncSession,
        league_id: UUID,
        request: Optional[SyncRequest] = None,
    ) -> SyncResponse:
        """Run the requested syncs, defaulting weeks from the NFL state."""
        request = request or SyncRequest()
        state = await self.client.get_nfl_state()
        response = SyncResponse(
            league_id=league_id,
            season_type=state.season_type,
            current_week=state.week,
        )

        if request.rosters:
            response.rosters_upserted = await self.sync_rosters(db, league_id)

        if request.matchups:
            weeks = request.weeks if request.weeks else default_sync_weeks(state)
            if weeks:
                response.imported_weeks, response.matchup_rows_upserted = (
                    await self.sync_matchups(db, league_id, weeks)
                )
            else:
                response.skipped.append("matchups: not regular season")

        if request.projections:
            season = request.season or state.season
            week = request.week or state.week
            if week >= 1 and (request.week or state.is_regular_season):
                response.projections_upserted = await self.sync_projections(
                    db, league_id, season, week
                )
            else:
                response.skipped.append("projections: not regular season")

        return response
