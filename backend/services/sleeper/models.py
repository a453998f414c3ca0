from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _SleeperModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class NflState(_SleeperModel):
    season: int
    week: int = 0
    season_type: str = "off"
    display_week: int | None = None
    leg: int | None = None

    @property
    def is_regular_season(self) -> bool:
        return self.season_type == "regular" and self.week >= 1


class SleeperLeague(_SleeperModel):
    league_id: str
    name: str = ""
    season: int | None = None
    status: str = ""
    total_rosters: int = 0
    scoring_settings: dict[str, float] = Field(default_factory=dict)

    @field_validator("scoring_settings", mode="before")
    @classmethod
    def default_scoring(cls, v: Any) -> dict[str, float]:
        return v or {}


class SleeperUser(_SleeperModel):
    user_id: str
    username: str | None = None
    display_name: str | None = None

    @property
    def name(self) -> str | None:
        return self.display_name or self.username


class SleeperRosterData(_SleeperModel):
    roster_id: int
    owner_id: str | None = None
    starters: list[str] = Field(default_factory=list)
    players: list[str] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("starters", "players", mode="before")
    @classmethod
    def drop_empty_slots(cls, v: Any) -> list[str]:
        return [str(p) for p in (v or []) if p and p != "0"]

    @field_validator("settings", mode="before")
    @classmethod
    def default_settings(cls, v: Any) -> dict[str, Any]:
        return v or {}


class SleeperMatchupData(_SleeperModel):
    roster_id: int
    matchup_id: int | None = None
    points: float = 0.0
    starters: list[str] = Field(default_factory=list)
    players: list[str] = Field(default_factory=list)

    @field_validator("points", mode="before")
    @classmethod
    def default_points(cls, v: Any) -> float:
        return v or 0.0

    @field_validator("starters", "players", mode="before")
    @classmethod
    def drop_empty_slots(cls, v: Any) -> list[str]:
        return [str(p) for p in (v or []) if p and p != "0"]
