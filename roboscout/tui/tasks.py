"""Background work for the TUI and the Textual messages it posts.

Worker threads never touch widgets. Event loading reports back through
``on_progress`` (the app's ``post_message``), and projector publications
are turned into messages on the app thread by ``message_for``.
"""

from __future__ import annotations

import logging
from typing import Callable

import requests
from textual.message import Message

from roboscout.config import Settings
from roboscout.data.event import Event, load_event
from roboscout.data.robotevents_client import RobotEventsClient, RobotEventsError
from roboscout.matches.projector import MatchListSnapshot, ProjectorEvent

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Message], None]


# --- Event loading ---


class EventLoaded(Message):
    """Posted when the event and its divisions are known."""

    def __init__(self, event: Event) -> None:
        self.event = event
        super().__init__()


class EventLoadError(Message):
    """Posted when the event cannot be looked up."""

    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__()


def run_load_event(on_progress: ProgressCallback, settings: Settings, sku: str) -> None:
    """Look up the event by SKU. Runs in a worker thread - no UI calls here."""
    if not settings.api_key:
        on_progress(EventLoadError("ROBOTEVENTS_API_KEY is not set in .env"))
        return

    client = RobotEventsClient(settings=settings)
    try:
        event = load_event(client, sku)
    except LookupError as e:
        on_progress(EventLoadError(str(e)))
        return
    except (requests.RequestException, RobotEventsError) as e:
        logger.warning("Event lookup for %s failed: %s", sku, e)
        on_progress(EventLoadError(f"Could not reach RobotEvents: {e}"))
        return

    on_progress(EventLoaded(event))


# --- Projector publications ---


class MatchRowsChanged(Message):
    """The projector published a new row sequence."""

    def __init__(self, snapshot: MatchListSnapshot) -> None:
        self.snapshot = snapshot
        super().__init__()


class PredictionStateChanged(Message):
    """The prediction flag or its calculating state changed."""

    def __init__(self, snapshot: MatchListSnapshot) -> None:
        self.snapshot = snapshot
        super().__init__()


class LoadingChanged(Message):
    def __init__(self, snapshot: MatchListSnapshot) -> None:
        self.snapshot = snapshot
        super().__init__()


_MESSAGES: dict[ProjectorEvent, type] = {
    ProjectorEvent.ROWS_CHANGED: MatchRowsChanged,
    ProjectorEvent.PREDICTIONS_CHANGED: PredictionStateChanged,
    ProjectorEvent.LOADING_CHANGED: LoadingChanged,
}


def message_for(event: ProjectorEvent, snapshot: MatchListSnapshot) -> Message:
    return _MESSAGES[event](snapshot)
