from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from config import SleeperConfig

from .cache import NullCache, ResponseCache, TTLCache
from .exceptions import SleeperAPIError, SleeperNotFoundError, SleeperRateLimitError
from .models import (
    NflState,
    SleeperLeague,
    SleeperMatchupData,
    SleeperRosterData,
    SleeperUser,
)

logger = logging.getLogger(__name__)


class SleeperClient:
    """
    Read-only client for the public Sleeper REST API.

    Successful GET responses are kept in ``cache``; pass ``NullCache()``
    to always hit the network.
    """

    def __init__(
        self,
        config: SleeperConfig | None = None,
        cache: ResponseCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or SleeperConfig()
        self.cache: ResponseCache = (
            cache if cache is not None else TTLCache(self.config.cache_ttl_seconds)
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        logger.info(
            f"Initialized SleeperClient (base_url={self.config.base_url}, "
            f"cache={self.cache.__class__.__name__})"
        )

    async def __aenter__(self) -> SleeperClient:
        limits = httpx.Limits(
            max_connections=self.config.max_connections,
            max_keepalive_connections=self.config.max_keepalive_connections,
        )
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            limits=limits,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Closed SleeperClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "SleeperClient must be used as async context manager"
            )
        return self._client

    def _backoff(self, attempt: int) -> float:
        return self.config.backoff_seconds * (2 ** attempt)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        cache_key = f"{endpoint}?{sorted((params or {}).items())}"
        if method == "GET":
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit: {endpoint}")
                return cached

        attempt = 0
        last_error: Exception | None = None
        last_status: int | None = None

        while attempt <= self.config.max_retries:
            try:
                response = await self.client.request(
                    method=method,
                    url=endpoint,
                    params=params,
                )

                if response.status_code == 404:
                    raise SleeperNotFoundError(
                        f"Resource not found: {endpoint}", status_code=404
                    )
                elif response.status_code == 429 or response.status_code >= 500:
                    last_status = response.status_code
                    if attempt == self.config.max_retries:
                        break
                    wait_time = self._backoff(attempt)
                    logger.warning(
                        f"Sleeper returned {response.status_code} for {endpoint}, "
                        f"retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                    attempt += 1
                    continue
                elif response.status_code >= 400:
                    raise SleeperAPIError(
                        f"Sleeper API error {response.status_code}: {endpoint}",
                        status_code=response.status_code,
                    )

                data = response.json()
                if method == "GET" and data is not None:
                    self.cache.set(cache_key, data)
                return data

            except httpx.RequestError as e:
                last_error = e
                logger.error(f"Network error: {e}")
                break

        if last_status == 429:
            raise SleeperRateLimitError(
                f"Rate limited on {endpoint} after {attempt} retries",
                status_code=429,
            )
        raise SleeperAPIError(
            f"Request failed after {attempt} retries: {last_error or last_status}",
            status_code=last_status,
        )

    async def get_nfl_state(self) -> NflState:
        data = await self._request("GET", "state/nfl")
        return NflState.model_validate(data)

    async def get_league(self, league_id: str) -> SleeperLeague:
        data = await self._request("GET", f"league/{league_id}")
        # Unknown league ids come back as 200 with a null body
        if not data:
            raise SleeperNotFoundError(f"League {league_id} not found", status_code=404)
        return SleeperLeague.model_validate(data)

    async def get_league_users(self, league_id: str) -> list[SleeperUser]:
        data = await self._request("GET", f"league/{league_id}/users")
        return [SleeperUser.model_validate(u) for u in data or []]

    async def get_league_rosters(self, league_id: str) -> list[SleeperRosterData]:
        data = await self._request("GET", f"league/{league_id}/rosters")
        return [SleeperRosterData.model_validate(r) for r in data or []]

    async def get_matchups(self, league_id: str, week: int) -> list[SleeperMatchupData]:
        data = await self._request("GET", f"league/{league_id}/matchups/{week}")
        return [SleeperMatchupData.model_validate(m) for m in data or []]

    async def get_projections(
        self,
        season: int,
        week: int,
        season_type: str = "regular",
    ) -> dict[str, dict[str, float]]:
        """Raw projected stat lines keyed by player id."""
        data = await self._request(
            "GET",
            f"projections/nfl/{season_type}/{season}/{week}",
        )
        if not isinstance(data, dict):
            return {}
        return {
            str(player_id): stats
            for player_id, stats in data.items()
            if isinstance(stats, dict)
        }


def create_sleeper_client(
    config: SleeperConfig | None = None,
    cache_enabled: bool = True,
) -> SleeperClient:
    config = config or SleeperConfig()
    cache = TTLCache(config.cache_ttl_seconds) if cache_enabled else NullCache()
    return SleeperClient(config, cache=cache)
