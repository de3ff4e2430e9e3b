"""
Application configuration. Loads from environment variables.
Scoring numbers live in onelist.services.posture.scoring_constants, not here.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache
from typing import Optional


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "OneList"
    debug: bool = False
    log_level: str = "INFO"

    # Snapshot persistence (single JSON blob, rewritten whole after each transition)
    snapshot_path: str = "onelist_snapshot.json"

    # Optional YAML scoring profile; None = built-in constants
    scoring_profile: Optional[str] = None

    # Objects not reviewed within this many days are reported as stale
    staleness_days: int = 90

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("ONELIST_LOG_LEVEL", self.log_level).upper()

        self.snapshot_path = os.getenv("ONELIST_SNAPSHOT_PATH", self.snapshot_path)
        self.scoring_profile = os.getenv("ONELIST_SCORING_PROFILE") or None
        self.staleness_days = int(
            os.getenv("ONELIST_STALENESS_DAYS", str(self.staleness_days))
        )
