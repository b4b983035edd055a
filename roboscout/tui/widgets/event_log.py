"""EventLog widget - timestamped, color-coded activity messages."""

from datetime import datetime

from textual.widgets import RichLog


class EventLog(RichLog):
    """Scrollable log of refreshes, predictions and failures."""

    DEFAULT_CSS = """
    EventLog {
        width: 36;
        border-left: solid $accent;
        padding: 0 1;
    }
    """

    MAX_LINES = 500
    _line_count: int = 0

    def log_info(self, message: str) -> None:
        self._write(message)

    def log_success(self, message: str) -> None:
        self._write(message, "green")

    def log_warning(self, message: str) -> None:
        self._write(message, "yellow")

    def log_error(self, message: str) -> None:
        self._write(message, "bold red")

    def _write(self, message: str, style: str = "") -> None:
        ts = datetime.now().strftime("%H:%M:%S")
        body = f"[{style}]{message}[/]" if style else message
        self.write(f"[dim]{ts}[/]  {body}")
        self._line_count += 1
        if self._line_count > self.MAX_LINES:
            self.clear()
            self._line_count = 0
