"""Configuration for Delve."""

import os
from dataclasses import dataclass
from pathlib import Path


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./delve.db"
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    starting_health: int = 100
    max_health: int = 100
    fuzzy_max_distance: int = 2

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        log_file = os.getenv("DELVE_LOG_FILE")

        return cls(
            database_url=os.getenv("DELVE_DATABASE_URL", cls.database_url),
            log_level=os.getenv("DELVE_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=_env_flag("DELVE_JSON_LOGS"),
            starting_health=int(
                os.getenv("DELVE_STARTING_HEALTH", str(cls.starting_health))
            ),
            max_health=int(os.getenv("DELVE_MAX_HEALTH", str(cls.max_health))),
            fuzzy_max_distance=int(
                os.getenv("DELVE_FUZZY_MAX_DISTANCE", str(cls.fuzzy_max_distance))
            ),
        )
