"""
RobotEvents API Client

Handles all communication with the RobotEvents API v2 (www.robotevents.com/api/v2)
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import requests

from roboscout.config import Settings, load_settings

logger = logging.getLogger(__name__)


class RobotEventsError(Exception):
    """Raised when the API answers with a non-200 status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"API error {status_code}: {message}")


class RobotEventsClient:
    """Client for the RobotEvents API"""

    PER_PAGE = 250

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or load_settings()
        self.base_url = self.settings.base_url
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.settings.api_key}",
                "Accept": "application/json",
            }
        )
        self.request_count = 0
        self.last_request_time = 0.0
        self.min_request_interval = self.settings.request_interval

        self.cache_dir = Path(self.settings.cache_dir)

    def _rate_limit(self) -> None:
        """Ensure we don't exceed rate limits"""
        elapsed = time.time() - self.last_request_time
        if elapsed < self.min_request_interval:
            time.sleep(self.min_request_interval - elapsed)
        self.last_request_time = time.time()

    def _get_cache_path(self, endpoint: str, params: dict) -> Path:
        """Generate cache file path for a request"""
        param_str = "_".join(f"{k}={v}" for k, v in sorted(params.items()))
        safe_endpoint = endpoint.strip("/").replace("/", "_")
        filename = f"{safe_endpoint}_{param_str}.json".replace("[]", "")
        return self.cache_dir / filename

    def _read_cache(self, cache_path: Path) -> Optional[Any]:
        """Cached payload, or None when missing, expired or unreadable"""
        if not cache_path.exists():
            return None
        try:
            with open(cache_path, "r") as f:
                cached = json.load(f)
            age = (datetime.now() - datetime.fromisoformat(cached["_cached_at"])).total_seconds()
            data = cached["data"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", cache_path.name, e)
            return None
        if age >= self.settings.cache_ttl_seconds:
            return None
        return data

    def _write_cache(self, cache_path: Path, data: Any) -> None:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = cache_path.with_name(cache_path.name + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump({"_cached_at": datetime.now().isoformat(), "data": data}, f)
        tmp_path.replace(cache_path)

    def _request(self, endpoint: str, params: Optional[dict] = None, use_cache: bool = False) -> dict:
        """Make an API request with optional caching and rate limiting"""
        params = params or {}

        cache_path = self._get_cache_path(endpoint, params)
        if use_cache:
            cached = self._read_cache(cache_path)
            if cached is not None:
                logger.debug("Cache hit for %s", endpoint)
                return cached

        self._rate_limit()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        response = self.session.get(url, params=params, timeout=self.settings.request_timeout)
        self.request_count += 1

        if response.status_code != 200:
            raise RobotEventsError(response.status_code, response.text)

        data = response.json()

        if use_cache:
            self._write_cache(cache_path, data)

        return data

    def _get_paginated(self, endpoint: str, params: Optional[dict] = None, use_cache: bool = False) -> list:
        """Collect ``data`` from every page of a paginated endpoint"""
        params = dict(params or {})
        params["per_page"] = self.PER_PAGE

        items: list = []
        page = 1
        while True:
            params["page"] = page
            response = self._request(endpoint, dict(params), use_cache=use_cache)
            items.extend(response.get("data", []))

            last_page = response.get("meta", {}).get("last_page", page)
            if page >= last_page:
                break
            page += 1

        logger.debug("Fetched %d items from %s (%d pages)", len(items), endpoint, page)
        return items

    def test_connection(self) -> bool:
        """Test if API connection works"""
        try:
            self._request("seasons", {"per_page": 1})
            return True
        except (requests.RequestException, RobotEventsError) as e:
            logger.warning("Connection test failed: %s", e)
            return False

    def get_event(self, sku: str) -> Optional[dict]:
        """Get event details, including divisions, by SKU"""
        events = self._request("events", {"sku[]": sku}, use_cache=True).get("data", [])
        return events[0] if events else None

    def get_division_matches(self, event_id: int, division_id: int) -> list:
        """Get all matches for one division of an event"""
        return self._get_paginated(f"events/{event_id}/divisions/{division_id}/matches")
