"""Pydantic models for API request/response types."""

from __future__ import annotations

from pydantic import BaseModel

from roboscout.matches.projection import format_score
from roboscout.matches.projector import MatchListSnapshot


class MatchRowOut(BaseModel):
    index: int
    name: str
    time: str
    red_team_ids: list[int]
    blue_team_ids: list[int]
    red_teams: list[str]
    blue_teams: list[str]
    red_score: str
    blue_score: str
    predicted: bool


class MatchList(BaseModel):
    sku: str
    division_id: int
    division: str
    loading: bool
    predictions_enabled: bool
    prediction_state: str
    error: str | None
    version: int
    rows: list[MatchRowOut]

    @classmethod
    def from_snapshot(cls, sku: str, snapshot: MatchListSnapshot) -> "MatchList":
        numbers = snapshot.team_numbers
        return cls(
            sku=sku,
            division_id=snapshot.division.id,
            division=snapshot.division.name,
            loading=snapshot.loading,
            predictions_enabled=snapshot.predictions_enabled,
            prediction_state=snapshot.prediction_state.value,
            error=str(snapshot.last_error) if snapshot.last_error else None,
            version=snapshot.version,
            rows=[
                MatchRowOut(
                    index=row.index,
                    name=row.display_name,
                    time=row.time_label,
                    red_team_ids=list(row.red_team_ids),
                    blue_team_ids=list(row.blue_team_ids),
                    red_teams=[numbers.get(i, "") for i in row.red_team_ids],
                    blue_teams=[numbers.get(i, "") for i in row.blue_team_ids],
                    red_score=format_score(row.red_score_display),
                    blue_score=format_score(row.blue_score_display),
                    predicted=row.is_predicted,
                )
                for row in snapshot.rows
            ],
        )
