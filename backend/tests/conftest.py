"""
Shared fixtures: an in-memory SQLite database and a seeded league.

The seeded league has three rosters in week 5 of 2024:
- roster 7 vs roster 12 (matchup 1)
- roster 3 on a bye
"""

from typing import Optional
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, enable_sqlite_savepoints
from models import League, PlayerProjection, SleeperMatchup, SleeperRoster, Wager
from schemas import BetSide, LeagueCreate, OfferCreate
from services import league_service, wager_service

ALICE = UUID("00000000-0000-0000-0000-00000000000a")
BOB = UUID("00000000-0000-0000-0000-00000000000b")
CAROL = UUID("00000000-0000-0000-0000-00000000000c")
OUTSIDER = UUID("00000000-0000-0000-0000-0000000000ff")

WEEK = 5
SEASON = 2024


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def league(db) -> League:
    """League owned by Alice with Bob and Carol as members (1000 tokens each)."""
    league = await league_service.create_league(
        db,
        LeagueCreate(name="Dynasty Degens", external_id="784512", season=SEASON),
        ALICE,
    )
    await league_service.join_league(db, league.id, BOB, "Bob")
    await league_service.join_league(db, league.id, CAROL, "Carol")

    db.add_all(
        [
            SleeperRoster(league_id=league.id, roster_id=7, owner_name="Bob",
                          starters=["p1", "p2"]),
            SleeperRoster(league_id=league.id, roster_id=12, owner_name=None,
                          starters=["p3", "p4", "0"]),
            SleeperRoster(league_id=league.id, roster_id=3, starters=["p5"]),
            SleeperMatchup(league_id=league.id, week=WEEK, roster_id=12, matchup_id=1),
            SleeperMatchup(league_id=league.id, week=WEEK, roster_id=7, matchup_id=1),
            SleeperMatchup(league_id=league.id, week=WEEK, roster_id=3, matchup_id=None),
            PlayerProjection(player_id="p1", season=SEASON, week=WEEK, points=20.0),
            PlayerProjection(player_id="p2", season=SEASON, week=WEEK, points=15.5),
            PlayerProjection(player_id="p3", season=SEASON, week=WEEK, points=18.0),
            PlayerProjection(player_id="p4", season=SEASON, week=WEEK, points=14.0),
        ]
    )
    await db.commit()
    return league


async def offer_on_roster_12(
    db: AsyncSession,
    league: League,
    *,
    creator: UUID = ALICE,
    token_amount: int = 10,
    spread: float = 3.5,
    payout_ratio: float = 2.0,
) -> Wager:
    """Offer "12 <spread> vs 7" (side B of matchup 0)."""
    return await wager_service.create_offer(
        db,
        league.id,
        creator,
        OfferCreate(
            week=WEEK,
            season=SEASON,
            matchup_index=0,
            side=BetSide.B,
            token_amount=token_amount,
            payout_ratio=payout_ratio,
            spread=spread,
        ),
    )


async def active_wager(
    db: AsyncSession,
    league: League,
    *,
    creator: UUID = ALICE,
    acceptor: UUID = BOB,
    token_amount: int = 10,
    spread: float = 3.5,
    payout_ratio: float = 2.0,
) -> Wager:
    """Offer on roster 12 and have it accepted, escrowing both stakes."""
    wager = await offer_on_roster_12(
        db,
        league,
        creator=creator,
        token_amount=token_amount,
        spread=spread,
        payout_ratio=payout_ratio,
    )
    return await wager_service.accept_wager(db, wager.id, acceptor)


async def insert_wager(
    db: AsyncSession,
    league: League,
    *,
    descriptor: str,
    terms: Optional[dict],
    token_amount: int = 10,
    status: str = "active",
    creator: UUID = ALICE,
    acceptor: Optional[UUID] = BOB,
) -> Wager:
    """Insert a wager row directly, bypassing escrow (for legacy rows)."""
    wager = Wager(
        league_id=league.id,
        created_by=creator,
        accepted_by=acceptor if status != "offered" else None,
        type=descriptor,
        token_amount=token_amount,
        status=status,
        terms=terms,
    )
    db.add(wager)
    await db.commit()
    return wager
