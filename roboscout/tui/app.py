"""RoboScout TUI Application - match list for one event division."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer
from textual.worker import Worker, WorkerState

from roboscout.config import Settings, load_settings
from roboscout.data.event import Event
from roboscout.matches.projector import (
    MatchListSnapshot,
    MatchRowProjector,
    PredictionState,
    ProjectorEvent,
)

from .tasks import (
    EventLoaded,
    EventLoadError,
    LoadingChanged,
    MatchRowsChanged,
    PredictionStateChanged,
    message_for,
    run_load_event,
)
from .widgets.event_log import EventLog
from .widgets.match_list_view import MatchListView
from .widgets.status_bar import StatusBar


class RoboScoutApp(App):
    """RoboScout TUI - division match list with score predictions."""

    TITLE = "RoboScout"

    BINDINGS = [
        Binding("r", "refresh", "Refresh"),
        Binding("p", "toggle_predictions", "Predictions"),
        Binding("ctrl+q", "quit_app", "Quit", show=True),
    ]

    def __init__(
        self,
        sku: str = "",
        division_id: Optional[int] = None,
        settings: Optional[Settings] = None,
        event: Optional[Event] = None,
    ) -> None:
        super().__init__()
        self._sku = sku or (event.sku if event else "")
        self._division_id = division_id
        self._settings = settings or load_settings()
        self._event = event
        self._projector: MatchRowProjector | None = None
        self._projector_worker: Worker | None = None
        self._ui_thread_id: int | None = None

    def compose(self) -> ComposeResult:
        yield StatusBar(id="status-bar")
        with Horizontal(id="main-content"):
            yield MatchListView(id="match-list")
            yield EventLog(id="event-log", markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self._ui_thread_id = threading.get_ident()
        self._event_log.log_info("RoboScout started")
        if self._event is not None:
            self._attach_event(self._event)
        else:
            self._event_log.log_info(f"Looking up event {self._sku}...")
            self._load_event()

    # --- Widget accessors ---

    @property
    def _event_log(self) -> EventLog:
        return self.query_one("#event-log", EventLog)

    @property
    def _match_list(self) -> MatchListView:
        return self.query_one("#match-list", MatchListView)

    @property
    def _status_bar(self) -> StatusBar:
        return self.query_one("#status-bar", StatusBar)

    @property
    def projector(self) -> MatchRowProjector | None:
        return self._projector

    # --- Event loading ---

    @work(thread=True)
    def _load_event(self) -> None:
        """Background event lookup by SKU."""
        run_load_event(self.post_message, self._settings, self._sku)

    def on_event_loaded(self, message: EventLoaded) -> None:
        self._attach_event(message.event)

    def on_event_load_error(self, message: EventLoadError) -> None:
        self._status_bar.event_name = self._sku or "No event"
        self._event_log.log_error(message.error)

    def _attach_event(self, event: Event) -> None:
        self._event = event
        self._status_bar.event_name = event.name or event.sku

        if not event.divisions:
            self._event_log.log_error(f"{event.sku} has no divisions")
            return

        try:
            division = event.division(self._division_id) if self._division_id else event.divisions[0]
        except KeyError as e:
            self._event_log.log_error(str(e.args[0]))
            return

        self._status_bar.division_name = division.name
        self.title = f"{division.name} Match List"

        self._projector = MatchRowProjector(
            event,
            division,
            dispatch=self._dispatch,
            tz=self._settings.display_tz,
        )
        self._projector.subscribe(self._on_projector_event)
        self._start_refresh()

    # --- Projector plumbing ---

    def _dispatch(self, fn: Callable[[], None]) -> None:
        """Run a projector publication on the app thread."""
        if threading.get_ident() == self._ui_thread_id:
            fn()
        else:
            self.call_from_thread(fn)

    def _on_projector_event(self, event: ProjectorEvent, snapshot: MatchListSnapshot) -> None:
        self.post_message(message_for(event, snapshot))

    def _projector_running(self) -> bool:
        return self._projector_worker is not None and self._projector_worker.state == WorkerState.RUNNING

    def _start_refresh(self, predict: bool = False) -> None:
        if self._projector is None:
            return
        if self._projector_running():
            self._event_log.log_warning("Already refreshing - please wait")
            return
        self._event_log.log_info("Calculating predictions..." if predict else "Refreshing matches...")
        self._projector_worker = self._run_refresh(predict)

    @work(thread=True)
    def _run_refresh(self, predict: bool) -> None:
        """Background fetch, ratings and optional predictions."""
        if self._projector is not None:
            self._projector.refresh(predict=predict)

    # --- Actions ---

    def action_refresh(self) -> None:
        if self._projector is None:
            self._event_log.log_warning("No division loaded")
            return
        self._start_refresh(predict=self._projector.predictions_enabled)

    def action_toggle_predictions(self) -> None:
        if self._projector is None:
            self._event_log.log_warning("No division loaded")
            return
        state = self._projector.snapshot().prediction_state
        if state == PredictionState.CALCULATING:
            self._event_log.log_warning("Predictions are already being calculated")
        elif state == PredictionState.ON:
            self._projector.disable_predictions()
        else:
            self._start_refresh(predict=True)

    def action_quit_app(self) -> None:
        self._event_log.log_info("Closing RoboScout...")
        self.exit()

    # --- Message handlers ---

    def on_match_rows_changed(self, message: MatchRowsChanged) -> None:
        snapshot = message.snapshot
        self._match_list.show_snapshot(snapshot)
        self._status_bar.match_count = len(snapshot.rows)

        if snapshot.loading:
            return
        if snapshot.is_empty:
            self._event_log.log_warning(f"No matches for {snapshot.division.name}")
        else:
            self._event_log.log_info(f"Showing {len(snapshot.rows)} matches")

    def on_prediction_state_changed(self, message: PredictionStateChanged) -> None:
        snapshot = message.snapshot
        previous = self._status_bar.prediction_state
        self._status_bar.prediction_state = snapshot.prediction_state

        if snapshot.prediction_state == PredictionState.ON:
            predicted = sum(1 for row in snapshot.rows if row.is_predicted)
            self._event_log.log_success(f"Predictions on ({predicted} matches)")
        elif snapshot.prediction_state == PredictionState.OFF and previous == PredictionState.CALCULATING:
            reason = f": {snapshot.last_error}" if snapshot.last_error else ""
            self._event_log.log_warning(f"Predictions unavailable{reason}")
        elif snapshot.prediction_state == PredictionState.OFF:
            self._event_log.log_info("Predictions off")

    def on_loading_changed(self, message: LoadingChanged) -> None:
        self._match_list.loading = message.snapshot.loading
