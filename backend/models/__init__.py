"""Database models module."""

from models.game_result import GameResult
from models.league import League, LeagueMember
from models.profile import Profile
from models.sleeper import PlayerProjection, SleeperMatchup, SleeperRoster
from models.transaction import TokenTransaction
from models.wager import Wager

__all__ = [
    "GameResult",
    "League",
    "LeagueMember",
    "PlayerProjection",
    "Profile",
    "SleeperMatchup",
    "SleeperRoster",
    "TokenTransaction",
    "Wager",
]
