from .cache import NullCache, ResponseCache, TTLCache
from .client import SleeperClient, create_sleeper_client
from .exceptions import (
    SleeperAPIError,
    SleeperNotFoundError,
    SleeperRateLimitError,
)
from .models import (
    NflState,
    SleeperLeague,
    SleeperMatchupData,
    SleeperRosterData,
    SleeperUser,
)

__all__ = [
    "SleeperClient",
    "create_sleeper_client",
    "ResponseCache",
    "TTLCache",
    "NullCache",
    "SleeperAPIError",
    "SleeperNotFoundError",
    "SleeperRateLimitError",
    "NflState",
    "SleeperLeague",
    "SleeperMatchupData",
    "SleeperRosterData",
    "SleeperUser",
]
