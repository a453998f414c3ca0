"""Sportsbook CLI entry point."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from uuid import UUID

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from config import get_settings
from database import close_db, get_db_session, init_db
from schemas import GameResultIn, SyncRequest
from services import SyncService, settlement_service
from services.sleeper import SleeperAPIError, create_sleeper_client
from utils.errors import SportsbookError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def _init_logfire() -> None:
    """Initialize Logfire if configured, without failing commands."""
    try:
        from observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create any missing tables."""

    async def _run() -> None:
        try:
            await init_db()
        finally:
            await close_db()

    try:
        asyncio.run(_run())
        logger.info("Database tables created")
        return 0
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        return 1


def cmd_sync(args: argparse.Namespace) -> int:
    """Pull Sleeper data for a league."""
    _init_logfire()
    request = SyncRequest(
        rosters=not args.skip_rosters,
        matchups=not args.skip_matchups,
        projections=not args.skip_projections,
        weeks=args.weeks,
        season=args.season,
        week=args.week,
    )

    async def _run():
        try:
            async with create_sleeper_client(get_settings().sleeper) as client:
                async with get_db_session() as db:
                    return await SyncService(client).sync_league(
                        db, args.league_id, request
                    )
        finally:
            await close_db()

    try:
        result = asyncio.run(_run())
    except (SleeperAPIError, SportsbookError) as e:
        logger.error(f"Sync failed: {e}")
        return 1

    print(result.model_dump_json(indent=2))
    return 0


def cmd_settle(args: argparse.Namespace) -> int:
    """Settle a league week from a JSON file of game results."""
    _init_logfire()
    try:
        raw = json.loads(Path(args.file).read_text(encoding="utf-8"))
        game_results = TypeAdapter(list[GameResultIn]).validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Could not read game results from {args.file}: {e}")
        return 1

    async def _run():
        try:
            async with get_db_session() as db:
                return await settlement_service.settle_bets(
                    db, args.league_id, args.week, args.season, game_results
                )
        finally:
            await close_db()

    try:
        result = asyncio.run(_run())
    except SportsbookError as e:
        logger.error(f"Settlement failed: {e.message}")
        return 1

    print(result.model_dump_json(indent=2))
    return 0 if not any(item.error for item in result.results) else 2


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Fantasy sportsbook: wager lifecycle and settlement",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_serve = subparsers.add_parser("serve", help="Run the API server")
    parser_serve.add_argument("--host", default=None)
    parser_serve.add_argument("--port", type=int, default=None)
    parser_serve.add_argument("--reload", action="store_true")
    parser_serve.set_defaults(func=cmd_serve)

    parser_init_db = subparsers.add_parser("init-db", help="Create database tables")
    parser_init_db.set_defaults(func=cmd_init_db)

    parser_sync = subparsers.add_parser("sync", help="Pull Sleeper data for a league")
    parser_sync.add_argument("league_id", type=UUID, help="League ID")
    parser_sync.add_argument("--weeks", type=int, nargs="+", default=None)
    parser_sync.add_argument("--season", type=int, default=None)
    parser_sync.add_argument("--week", type=int, default=None, help="Projection week")
    parser_sync.add_argument("--skip-rosters", action="store_true")
    parser_sync.add_argument("--skip-matchups", action="store_true")
    parser_sync.add_argument("--skip-projections", action="store_true")
    parser_sync.set_defaults(func=cmd_sync)

    parser_settle = subparsers.add_parser(
        "settle",
        help="Settle a league week from a JSON file of game results",
    )
    parser_settle.add_argument("league_id", type=UUID, help="League ID")
    parser_settle.add_argument("--week", type=int, required=True)
    parser_settle.add_argument("--season", type=int, required=True)
    parser_settle.add_argument(
        "--file",
        required=True,
        help="JSON array of {home_roster_id, away_roster_id, home_points, away_points}",
    )
    parser_settle.set_defaults(func=cmd_settle)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
