"""Runtime settings loaded from the environment (.env supported)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Settings shared by the API client, the TUI and the web API."""

    api_key: str = ""
    base_url: str = "https://www.robotevents.com/api/v2"
    cache_dir: Path = PROJECT_ROOT / "data" / "api_cache"
    cache_ttl_seconds: int = 3600
    request_interval: float = 0.5
    request_timeout: float = 15.0
    timezone: Optional[str] = None
    log_level: str = "INFO"

    @property
    def display_tz(self) -> tzinfo | None:
        """Timezone used for match times, None means local time."""
        if not self.timezone:
            return None
        return ZoneInfo(self.timezone)


def load_settings(env_file: Path | None = None) -> Settings:
    """Read settings from environment variables after loading .env."""
    load_dotenv(env_file or PROJECT_ROOT / ".env")

    defaults = Settings()
    settings = Settings(
        api_key=os.getenv("ROBOTEVENTS_API_KEY", ""),
        base_url=os.getenv("ROBOTEVENTS_BASE_URL", defaults.base_url).rstrip("/"),
        cache_dir=Path(os.getenv("ROBOSCOUT_CACHE_DIR", str(defaults.cache_dir))),
        cache_ttl_seconds=int(os.getenv("ROBOSCOUT_CACHE_TTL", defaults.cache_ttl_seconds)),
        request_interval=float(os.getenv("ROBOSCOUT_REQUEST_INTERVAL", defaults.request_interval)),
        request_timeout=float(os.getenv("ROBOSCOUT_REQUEST_TIMEOUT", defaults.request_timeout)),
        timezone=os.getenv("ROBOSCOUT_TIMEZONE") or None,
        log_level=os.getenv("ROBOSCOUT_LOG_LEVEL", defaults.log_level).upper(),
    )

    if not settings.api_key:
        logger.warning("ROBOTEVENTS_API_KEY is not set - API requests will be rejected")

    return settings
