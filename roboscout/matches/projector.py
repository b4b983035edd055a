"""MatchRowProjector - owns the published match rows for one division.

Fetching runs on whatever thread calls refresh()/predict() (a worker in the
TUI, a threadpool thread in the web API). Every state change is published as
a new immutable MatchListSnapshot through ``dispatch``, which runs the swap
on the renderer's thread. Readers only ever see a complete snapshot.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import tzinfo
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol

from roboscout.data.models import Division, Match

from .errors import (
    FetchFailure,
    MatchDataError,
    PredictionFailure,
    PredictorUnavailable,
    RatingsFailure,
)
from .projection import MatchRow, Side, format_score, project_rows, select_scores

logger = logging.getLogger(__name__)


class PredictionState(str, Enum):
    OFF = "off"
    CALCULATING = "calculating"
    ON = "on"


class ProjectorEvent(str, Enum):
    ROWS_CHANGED = "rows_changed"
    PREDICTIONS_CHANGED = "predictions_changed"
    LOADING_CHANGED = "loading_changed"


class MatchDataService(Protocol):
    """What the projector needs from the event data service."""

    def fetch_matches(self, division: Division) -> list[Match]: ...

    def calculate_team_performance_ratings(self, division: Division) -> None: ...

    def predict_matches(self, division: Division) -> None: ...

    def matches_for(self, division: Division) -> list[Match]: ...


@dataclass(frozen=True)
class MatchListSnapshot:
    """Everything a renderer needs, published as one unit."""

    division: Division
    matches: tuple[Match, ...] = ()
    rows: tuple[MatchRow, ...] = ()
    predictions_enabled: bool = False
    prediction_state: PredictionState = PredictionState.OFF
    loading: bool = True
    last_error: Optional[MatchDataError] = None
    version: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def team_numbers(self) -> dict[int, str]:
        """Team id -> team number for every team in the match list."""
        numbers: dict[int, str] = {}
        for match in self.matches:
            for team in match.red_alliance + match.blue_alliance:
                numbers[team.id] = team.number
        return numbers


Listener = Callable[[ProjectorEvent, MatchListSnapshot], None]
Dispatch = Callable[[Callable[[], None]], None]


def _call_now(fn: Callable[[], None]) -> None:
    fn()


def _state_for(enabled: bool) -> PredictionState:
    return PredictionState.ON if enabled else PredictionState.OFF


def _check_index(row_index: int) -> None:
    if row_index < 0:
        raise IndexError(f"row index {row_index} is negative")


class MatchRowProjector:
    """Turns one division's matches into display rows and keeps them current."""

    def __init__(
        self,
        service: MatchDataService,
        division: Division,
        dispatch: Dispatch | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._service = service
        self._division = division
        self._dispatch = dispatch or _call_now
        self._tz = tz
        self._snapshot = MatchListSnapshot(division=division)
        self._write_lock = threading.Lock()
        self._busy = threading.Lock()
        self._disable_requested = False
        self._listeners: list[Listener] = []

    # --- Queries ---

    @property
    def division(self) -> Division:
        return self._division

    @property
    def predictions_enabled(self) -> bool:
        return self._snapshot.predictions_enabled

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def snapshot(self) -> MatchListSnapshot:
        return self._snapshot

    def rows(self) -> tuple[MatchRow, ...]:
        return self._snapshot.rows

    def loading(self) -> bool:
        return self._snapshot.loading

    def score_for(self, row_index: int, side: Side | str) -> str:
        """Score text for one side of a row, derived from the current flag."""
        _check_index(row_index)
        snapshot = self._snapshot
        red, blue = select_scores(snapshot.matches[row_index], snapshot.predictions_enabled)
        return format_score(red if Side(side) == Side.RED else blue)

    def is_predicted(self, row_index: int) -> bool:
        _check_index(row_index)
        return self._snapshot.rows[row_index].is_predicted

    # --- Subscriptions ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Operations ---

    def refresh(self, predict: bool = False) -> bool:
        """Fetch matches and ratings, optionally predict, then publish.

        Returns False without doing anything if a refresh or predict is
        already in flight.
        """
        if not self._busy.acquire(blocking=False):
            logger.warning("Refresh of %s already in progress - request dropped", self._division.name)
            return False

        self._disable_requested = False
        try:
            self._publish(
                lambda s: replace(
                    s,
                    loading=True,
                    prediction_state=PredictionState.CALCULATING if predict else s.prediction_state,
                )
            )

            matches, error = self._fetch()
            force_off = error is not None
            predicted = False

            if predict and not force_off:
                predicted_matches, error = self._run_prediction()
                if predicted_matches is not None:
                    matches = predicted_matches
                    predicted = True

            def finish(current: MatchListSnapshot) -> MatchListSnapshot:
                if force_off or self._disable_requested:
                    enabled = False
                elif predicted:
                    enabled = True
                else:
                    enabled = current.predictions_enabled
                return self._project(current, matches, enabled, error)

            self._publish(finish)
            logger.info("Published %d matches for %s", len(matches), self._division.name)
        finally:
            self._busy.release()

        return True

    def predict(self) -> bool:
        """Request predictions and turn the overlay on if they arrive.

        A failure leaves rows and the flag untouched. Returns False if a
        refresh or predict is already in flight.
        """
        if not self._busy.acquire(blocking=False):
            logger.warning("Predictions for %s already in progress - request dropped", self._division.name)
            return False

        self._disable_requested = False
        try:
            self._publish(lambda s: replace(s, prediction_state=PredictionState.CALCULATING))
            matches, error = self._run_prediction()

            if matches is None:
                self._publish(
                    lambda s: replace(
                        s, prediction_state=_state_for(s.predictions_enabled), last_error=error
                    )
                )
            else:
                self._publish(lambda s: self._project(s, matches, not self._disable_requested, None))
        finally:
            self._busy.release()

        return True

    def disable_predictions(self) -> None:
        """Hide the prediction overlay without refetching.

        Never dropped: if a refresh or predict is in flight, its final
        publication keeps the overlay off as well.
        """
        if self.busy:
            self._disable_requested = True
        self._publish(lambda s: self._project(s, s.matches, False, s.last_error))

    # --- Internals ---

    def _fetch(self) -> tuple[list[Match], Optional[MatchDataError]]:
        division = self._division
        try:
            matches = self._service.fetch_matches(division)
        except FetchFailure as e:
            logger.warning("Could not fetch matches for %s: %s", division.name, e)
            return list(self._service.matches_for(division)), e

        try:
            self._service.calculate_team_performance_ratings(division)
        except RatingsFailure as e:
            logger.info("Ratings unavailable for %s: %s", division.name, e)
            return list(matches), e

        return list(matches), None

    def _run_prediction(self) -> tuple[Optional[list[Match]], Optional[MatchDataError]]:
        division = self._division
        try:
            self._service.predict_matches(division)
        except PredictorUnavailable as e:
            logger.info("No predictor available for %s: %s", division.name, e)
            return None, e
        except PredictionFailure as e:
            logger.warning("Predictions failed for %s: %s", division.name, e)
            return None, e
        return list(self._service.matches_for(division)), None

    def _project(
        self,
        current: MatchListSnapshot,
        matches: Iterable[Match],
        enabled: bool,
        error: Optional[MatchDataError],
    ) -> MatchListSnapshot:
        matches = tuple(matches)
        return replace(
            current,
            matches=matches,
            rows=project_rows(matches, enabled, self._tz),
            predictions_enabled=enabled,
            prediction_state=_state_for(enabled),
            loading=False,
            last_error=error,
        )

    def _publish(self, update: Callable[[MatchListSnapshot], MatchListSnapshot]) -> None:
        """Swap in ``update(current)`` on the dispatch thread and notify listeners."""

        def apply() -> None:
            with self._write_lock:
                previous = self._snapshot
                current = replace(update(previous), version=previous.version + 1)
                self._snapshot = current

            events: list[ProjectorEvent] = []
            if current.rows is not previous.rows:
                events.append(ProjectorEvent.ROWS_CHANGED)
            if (
                current.predictions_enabled != previous.predictions_enabled
                or current.prediction_state != previous.prediction_state
            ):
                events.append(ProjectorEvent.PREDICTIONS_CHANGED)
            if current.loading != previous.loading:
                events.append(ProjectorEvent.LOADING_CHANGED)

            for event in events:
                for listener in list(self._listeners):
                    listener(event, current)

        self._dispatch(apply)
