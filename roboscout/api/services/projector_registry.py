"""ProjectorRegistry - one MatchRowProjector per event division."""

from __future__ import annotations

import logging
import threading
from datetime import tzinfo
from typing import Callable

from roboscout.data.event import Event
from roboscout.matches.projector import MatchRowProjector

logger = logging.getLogger(__name__)

EventLoader = Callable[[str], Event]


class ProjectorRegistry:
    """Caches events by SKU and projectors by (SKU, division id).

    Thread-safe: FastAPI runs sync endpoints on a threadpool.
    """

    def __init__(self, load_event: EventLoader, tz: tzinfo | None = None) -> None:
        self._load_event = load_event
        self._tz = tz
        self._events: dict[str, Event] = {}
        self._projectors: dict[tuple[str, int], MatchRowProjector] = {}
        self._lock = threading.Lock()

    def get(self, sku: str, division_id: int) -> MatchRowProjector:
        """Return the projector for a division, creating it on first use.

        Raises:
            LookupError: Unknown event SKU or division id.
        """
        key = (sku, division_id)
        with self._lock:
            projector = self._projectors.get(key)
            if projector is not None:
                return projector
            event = self._events.get(sku)

        # Network lookup runs unlocked; the first event stored for a SKU wins
        if event is None:
            loaded = self._load_event(sku)
            with self._lock:
                event = self._events.setdefault(sku, loaded)
            if event is loaded:
                logger.info("Loaded event %s (%d divisions)", sku, len(event.divisions))

        division = event.division(division_id)
        with self._lock:
            return self._projectors.setdefault(
                key, MatchRowProjector(event, division, tz=self._tz)
            )
