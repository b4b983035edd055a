"""Team performance ratings (OPR / DPR / CCWM) and score predictions.

OPR is the least-squares solution of A @ opr = scores, where each row of A
marks the two teams of one alliance in one qualification match. DPR uses
the opposing alliance's score instead, and CCWM is OPR - DPR.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

import numpy as np

from roboscout.data.models import Match, Round
from roboscout.matches.errors import RatingsFailure


@dataclass(frozen=True)
class TeamPerformanceRatings:
    team_id: int
    opr: float
    dpr: float
    ccwm: float


def calculate_ratings(matches: Iterable[Match]) -> dict[int, TeamPerformanceRatings]:
    """Compute ratings for every team that played a completed qualifier.

    Raises:
        RatingsFailure: No completed qualification matches, or too few of
            them to separate every team's contribution.
    """
    played = [m for m in matches if m.round == Round.QUALIFICATION and m.completed()]
    if not played:
        raise RatingsFailure("No completed qualification matches")

    team_ids = sorted({team.id for m in played for team in m.red_alliance + m.blue_alliance})
    column = {team_id: i for i, team_id in enumerate(team_ids)}

    incidence = np.zeros((2 * len(played), len(team_ids)))
    scored = np.zeros(2 * len(played))
    conceded = np.zeros(2 * len(played))

    for i, match in enumerate(played):
        red_row, blue_row = 2 * i, 2 * i + 1
        for team in match.red_alliance:
            incidence[red_row, column[team.id]] = 1
        for team in match.blue_alliance:
            incidence[blue_row, column[team.id]] = 1
        scored[red_row], conceded[red_row] = match.red_score, match.blue_score
        scored[blue_row], conceded[blue_row] = match.blue_score, match.red_score

    # A minimum-norm lstsq answer exists for any schedule, but below full rank
    # it splits score between partners arbitrarily, so predictions stay off
    # until every team's contribution is determined.
    rank = np.linalg.matrix_rank(incidence)
    if rank < len(team_ids):
        raise RatingsFailure(
            f"Not enough completed matches to rate {len(team_ids)} teams (rank {rank})"
        )

    opr = np.linalg.lstsq(incidence, scored, rcond=None)[0]
    dpr = np.linalg.lstsq(incidence, conceded, rcond=None)[0]

    return {
        team_id: TeamPerformanceRatings(
            team_id=team_id,
            opr=float(opr[i]),
            dpr=float(dpr[i]),
            ccwm=float(opr[i] - dpr[i]),
        )
        for team_id, i in column.items()
    }


def predict_alliance_score(
    team_ids: Iterable[int], ratings: dict[int, TeamPerformanceRatings]
) -> Optional[int]:
    """Rounded sum of the alliance's OPRs, or None if a team is unrated."""
    total = 0.0
    for team_id in team_ids:
        if team_id not in ratings:
            return None
        total += ratings[team_id].opr
    return max(0, int(round(total)))


def predict_match(match: Match, ratings: dict[int, TeamPerformanceRatings]) -> Match:
    """Return a copy of ``match`` carrying predicted scores when possible."""
    red = predict_alliance_score((t.id for t in match.red_alliance), ratings)
    blue = predict_alliance_score((t.id for t in match.blue_alliance), ratings)
    if red is None or blue is None:
        return replace(match, predicted=False, predicted_red_score=0, predicted_blue_score=0)
    return replace(match, predicted=True, predicted_red_score=red, predicted_blue_score=blue)
