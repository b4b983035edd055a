"""Event data entities parsed from RobotEvents API payloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional


class Round(IntEnum):
    PRACTICE = 1
    QUALIFICATION = 2
    QUARTERFINALS = 3
    SEMIFINALS = 4
    FINALS = 5
    ROUND_OF_16 = 6


@dataclass(frozen=True)
class Team:
    id: int
    number: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Team":
        return cls(id=int(data["id"]), number=data.get("name") or data.get("number") or "")


@dataclass(frozen=True)
class Division:
    id: int
    name: str = ""
    order: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Division":
        return cls(id=int(data["id"]), name=data.get("name", ""), order=int(data.get("order") or 0))


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp from the API, None when missing."""
    if not value:
        return None
    # Older interpreters reject a trailing "Z" in fromisoformat
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Match:
    """A single match in one division.

    Instances are never mutated: predictions are applied by building a new
    Match with ``dataclasses.replace``.
    """

    id: int
    name: str
    red_alliance: tuple[Team, Team]
    blue_alliance: tuple[Team, Team]
    round: int = Round.QUALIFICATION
    instance: int = 1
    matchnum: int = 0
    field: str = ""
    scheduled: Optional[datetime] = None
    started: Optional[datetime] = None
    red_score: int = 0
    blue_score: int = 0
    scored: bool = False
    predicted: bool = False
    predicted_red_score: int = 0
    predicted_blue_score: int = 0

    def completed(self) -> bool:
        """True once the actual scores are final."""
        if self.scored:
            return True
        return self.started is not None and (self.red_score != 0 or self.blue_score != 0)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Match":
        """Build a Match from a RobotEvents match object.

        Raises:
            ValueError: If an alliance is missing or does not hold exactly two teams.
        """
        alliances: dict[str, dict[str, Any]] = {}
        for alliance in data.get("alliances") or []:
            alliances[alliance.get("color", "")] = alliance

        teams: dict[str, tuple[Team, Team]] = {}
        scores: dict[str, int] = {}
        for color in ("red", "blue"):
            if color not in alliances:
                raise ValueError(f"Match {data.get('id')} has no {color} alliance")
            members = [Team.from_json(entry["team"]) for entry in alliances[color].get("teams") or []]
            if len(members) != 2:
                raise ValueError(
                    f"Match {data.get('id')} {color} alliance has {len(members)} teams, expected 2"
                )
            teams[color] = (members[0], members[1])
            scores[color] = int(alliances[color].get("score") or 0)

        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            red_alliance=teams["red"],
            blue_alliance=teams["blue"],
            round=int(data.get("round") or Round.QUALIFICATION),
            instance=int(data.get("instance") or 1),
            matchnum=int(data.get("matchnum") or 0),
            field=data.get("field") or "",
            scheduled=parse_timestamp(data.get("scheduled")),
            started=parse_timestamp(data.get("started")),
            red_score=scores["red"],
            blue_score=scores["blue"],
            scored=bool(data.get("scored", False)),
        )
