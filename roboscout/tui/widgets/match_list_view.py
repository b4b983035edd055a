"""MatchListView widget - the division match list."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import DataTable, Static

from roboscout.matches.projection import format_score
from roboscout.matches.projector import MatchListSnapshot

PREDICTED_STYLE = "dim italic"


class MatchListView(Widget):
    """Shows one row per match; predicted rows are dimmed."""

    DEFAULT_CSS = """
    MatchListView {
        height: 100%;
        width: 1fr;
    }
    MatchListView DataTable {
        height: 1fr;
    }
    MatchListView .matches-empty {
        width: 100%;
        height: 100%;
        content-align: center middle;
        color: $text-muted;
    }
    """

    EMPTY_TEXT = "No matches yet\n\nPress r to refresh"

    def compose(self) -> ComposeResult:
        yield Static(self.EMPTY_TEXT, id="matches-empty", classes="matches-empty")
        yield DataTable(id="matches-table", cursor_type="row", zebra_stripes=True)

    def on_mount(self) -> None:
        table = self.query_one("#matches-table", DataTable)
        table.add_columns("Match", "Time", "Red", "Red score", "Blue score", "Blue")
        table.display = False

    def show_snapshot(self, snapshot: MatchListSnapshot) -> None:
        """Replace the table contents with the snapshot's rows."""
        table = self.query_one("#matches-table", DataTable)
        empty = self.query_one("#matches-empty", Static)
        table.clear()

        if snapshot.is_empty:
            empty.update("Loading matches..." if snapshot.loading else "No matches available for this division")
            empty.display = True
            table.display = False
            return

        empty.display = False
        table.display = True

        numbers = snapshot.team_numbers
        for row in snapshot.rows:
            dim = PREDICTED_STYLE if row.is_predicted else ""
            red_teams = " ".join(numbers.get(team_id, "") for team_id in row.red_team_ids)
            blue_teams = " ".join(numbers.get(team_id, "") for team_id in row.blue_team_ids)
            table.add_row(
                Text(row.display_name, style=dim),
                row.time_label,
                Text(red_teams, style="red"),
                Text(format_score(row.red_score_display), style=f"bold red {dim}".strip()),
                Text(format_score(row.blue_score_display), style=f"bold blue {dim}".strip()),
                Text(blue_teams, style="blue"),
                key=str(row.index),
            )
