"""StatusBar widget - reactive status line at the top of the TUI."""

from textual.app import ComposeResult
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Static

from roboscout.matches.projector import PredictionState

PREDICTION_LABELS = {
    PredictionState.OFF: "off",
    PredictionState.CALCULATING: "calculating...",
    PredictionState.ON: "on",
}


class StatusBar(Widget):
    """Displays the event, division, match count and prediction state."""

    DEFAULT_CSS = """
    StatusBar {
        dock: top;
        height: 1;
        background: $accent;
        color: $text;
    }
    StatusBar Static {
        width: 1fr;
        content-align: center middle;
    }
    """

    event_name: reactive[str] = reactive("Loading event...")
    division_name: reactive[str] = reactive("-")
    match_count: reactive[int] = reactive(0)
    prediction_state: reactive[PredictionState] = reactive(PredictionState.OFF)

    def compose(self) -> ComposeResult:
        yield Static(id="status-text")

    def _render_status(self) -> str:
        predictions = PREDICTION_LABELS[self.prediction_state]
        return (
            f" {self.event_name}  |  {self.division_name}  |  "
            f"{self.match_count} matches  |  Predictions: {predictions}"
        )

    def watch_event_name(self) -> None:
        self._update_display()

    def watch_division_name(self) -> None:
        self._update_display()

    def watch_match_count(self) -> None:
        self._update_display()

    def watch_prediction_state(self) -> None:
        self._update_display()

    def on_mount(self) -> None:
        self._update_display()

    def _update_display(self) -> None:
        try:
            self.query_one("#status-text", Static).update(self._render_status())
        except NoMatches:
            # Watchers can fire before compose has run
            pass
