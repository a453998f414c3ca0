"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class SleeperConfig(BaseModel):
    """Sleeper API client parameters."""

    base_url: str = "https://api.sleeper.app/v1"
    timeout_seconds: float = 30.0
    max_connections: int = 20
    max_keepalive_connections: int = 10
    max_retries: int = 3
    backoff_seconds: float = 0.5
    cache_ttl_seconds: float = 300.0  # 5 minutes


class SportsbookConfig(BaseModel):
    """Wagering rules and defaults."""

    initial_token_balance: int = 1000
    default_payout_ratio: float = 2.0
    min_payout_ratio: float = 1.0
    max_payout_ratio: float = 5.0
    default_hours_until_game: float = 168.0
    # Legacy behaviour: settle unparseable wagers as a push instead of
    # routing them to manual review
    unresolvable_as_push: bool = False


class Settings(BaseSettings):
    """Application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # CORS Settings
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./sportsbook.db",
        description="SQLAlchemy async database URL"
    )
    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup"
    )

    # Settlement / admin routes
    settlement_api_key: str = Field(
        default="",
        description="Service key required by settlement and admin routes (empty disables the check)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Observability
    logfire_token: str = Field(
        default="",
        description="Logfire observability token"
    )

    # Optional YAML overrides for the nested sections below
    config_file: Path = Field(
        default=Path("config.yaml"),
        description="Path to YAML file with sleeper/sportsbook overrides"
    )

    # Nested configuration sections
    sleeper: SleeperConfig = Field(default_factory=SleeperConfig)
    sportsbook: SportsbookConfig = Field(default_factory=SportsbookConfig)

    @field_validator("allowed_origins")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.config_file

        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}. Using defaults.")
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in ["sleeper", "sportsbook"]:
                if section_name in yaml_config:
                    section = getattr(self, section_name)
                    section_dict = section.model_dump()
                    section_dict.update(yaml_config[section_name])
                    setattr(self, section_name, section.__class__(**section_dict))

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings


settings = get_settings()
