"""
Configuration - Environment-driven settings.

    DECKFORGE_ENV          development | production (default development)
    ALLOWED_ORIGINS        comma-separated CORS origins (default *)
    DECKFORGE_LOG_LEVEL    root log level for the CLI and API (default INFO)
    DECKFORGE_SESSION_TTL  seconds before a finished session is cleaned up (default 3600)
    DECKFORGE_SEED         default game seed (default: random per game)
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping


@dataclass
class Settings:
    """Runtime settings for the service layers."""
    env: str = "development"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    session_ttl_seconds: int = 3600
    default_seed: int | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        seed = env.get("DECKFORGE_SEED")
        return cls(
            env=env.get("DECKFORGE_ENV", "development"),
            allowed_origins=[
                origin.strip()
                for origin in env.get("ALLOWED_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            log_level=env.get("DECKFORGE_LOG_LEVEL", "INFO").upper(),
            session_ttl_seconds=int(env.get("DECKFORGE_SESSION_TTL", "3600")),
            default_seed=int(seed) if seed else None,
        )

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def configure_logging(settings: Settings) -> None:
    """Set the root log level. Only entry points (CLI, API app) call this."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
