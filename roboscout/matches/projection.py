"""Pure projection from matches to display rows.

Nothing here holds state: the prediction flag is passed in explicitly so a
row sequence can be reproduced from (matches, flag) alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Iterable, Optional

from roboscout.data.models import Match

# Applied left to right, each on the result of the previous one
ROUND_ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("Qualifier", "Q"),
    ("Practice", "P"),
    ("Final", "F"),
    ("#", ""),
)

BLANK_TIME = " "


class Side(str, Enum):
    RED = "red"
    BLUE = "blue"


@dataclass(frozen=True)
class MatchRow:
    """One renderable match row."""

    index: int
    display_name: str
    time_label: str
    red_team_ids: tuple[int, int]
    blue_team_ids: tuple[int, int]
    is_predicted: bool
    red_score_display: Optional[int]
    blue_score_display: Optional[int]

    def score(self, side: Side) -> Optional[int]:
        return self.red_score_display if side == Side.RED else self.blue_score_display


def abbreviate_round_name(name: str) -> str:
    """Shorten a round label, e.g. "Qualifier #3" -> "Q3", "Practice Final #1" -> "PF1"."""
    for long_form, short_form in ROUND_ABBREVIATIONS:
        name = name.replace(long_form, short_form)
    return "".join(name.split())


def format_clock(value: datetime, tz: tzinfo | None = None) -> str:
    """Format as a 12-hour clock with minutes, e.g. "2:05 PM".

    Aware datetimes are shown in ``tz`` (local time when None); naive ones
    are shown unchanged.
    """
    if value.tzinfo is not None:
        value = value.astimezone(tz)
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {meridiem}"


def time_label(match: Match, tz: tzinfo | None = None) -> str:
    if match.started is not None:
        return format_clock(match.started, tz)
    if match.scheduled is not None:
        return format_clock(match.scheduled, tz)
    return BLANK_TIME


def select_scores(match: Match, predictions_enabled: bool) -> tuple[Optional[int], Optional[int]]:
    """Pick the (red, blue) scores to show, None meaning nothing to show.

    Predicted scores win whenever the overlay is visible for this match;
    otherwise actual scores are shown once the match is completed.
    """
    is_predicted = match.predicted and predictions_enabled
    if not (match.completed() or is_predicted):
        return None, None
    if is_predicted:
        return match.predicted_red_score, match.predicted_blue_score
    return match.red_score, match.blue_score


def format_score(value: Optional[int]) -> str:
    return "" if value is None else str(value)


def project_row(
    index: int, match: Match, predictions_enabled: bool, tz: tzinfo | None = None
) -> MatchRow:
    red_score, blue_score = select_scores(match, predictions_enabled)
    return MatchRow(
        index=index,
        display_name=abbreviate_round_name(match.name),
        time_label=time_label(match, tz),
        red_team_ids=(match.red_alliance[0].id, match.red_alliance[1].id),
        blue_team_ids=(match.blue_alliance[0].id, match.blue_alliance[1].id),
        is_predicted=match.predicted and predictions_enabled,
        red_score_display=red_score,
        blue_score_display=blue_score,
    )


def project_rows(
    matches: Iterable[Match], predictions_enabled: bool, tz: tzinfo | None = None
) -> tuple[MatchRow, ...]:
    """Project every match in fetch order."""
    return tuple(
        project_row(i, match, predictions_enabled, tz) for i, match in enumerate(matches)
    )
