"""Event - match data service for one RobotEvents event.

Implements the data service the MatchRowProjector consumes: fetching a
division's matches, computing team performance ratings and applying score
predictions. All network and parse errors are converted to the failure
types in roboscout.matches.errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from roboscout.matches.errors import FetchFailure, PredictionFailure, PredictorUnavailable, RatingsFailure
from roboscout.predictions.ratings import TeamPerformanceRatings, calculate_ratings, predict_match

from .models import Division, Match
from .robotevents_client import RobotEventsClient, RobotEventsError

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """A competition event and the per-division data fetched for it."""

    id: int
    sku: str
    name: str = ""
    divisions: list[Division] = field(default_factory=list)
    client: Optional[RobotEventsClient] = field(default=None, repr=False)
    matches: dict[int, list[Match]] = field(default_factory=dict, repr=False)
    ratings: dict[int, dict[int, TeamPerformanceRatings]] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: dict[str, Any], client: Optional[RobotEventsClient] = None) -> "Event":
        divisions = sorted(
            (Division.from_json(d) for d in data.get("divisions") or []),
            key=lambda d: d.order,
        )
        return cls(
            id=int(data["id"]),
            sku=data.get("sku", ""),
            name=data.get("name", ""),
            divisions=divisions,
            client=client,
        )

    def division(self, division_id: int) -> Division:
        for division in self.divisions:
            if division.id == division_id:
                return division
        raise KeyError(f"Event {self.sku} has no division {division_id}")

    def matches_for(self, division: Division) -> list[Match]:
        return list(self.matches.get(division.id, []))

    def fetch_matches(self, division: Division) -> list[Match]:
        """Fetch and store the division's matches in API order."""
        if self.client is None:
            raise FetchFailure(f"Event {self.sku} has no API client")

        try:
            payload = self.client.get_division_matches(self.id, division.id)
            matches = [Match.from_json(item) for item in payload]
        except (requests.RequestException, RobotEventsError) as e:
            raise FetchFailure(f"Could not fetch matches for {division.name}: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise FetchFailure(f"Malformed match data for {division.name}: {e}") from e

        self.matches[division.id] = matches
        logger.debug("Fetched %d matches for %s / %s", len(matches), self.sku, division.name)
        return list(matches)

    def calculate_team_performance_ratings(self, division: Division) -> None:
        """Compute OPR/DPR/CCWM from the stored matches.

        Stale ratings are dropped on failure so predictions cannot be built
        from them.
        """
        try:
            self.ratings[division.id] = calculate_ratings(self.matches.get(division.id, []))
        except RatingsFailure:
            self.ratings.pop(division.id, None)
            raise

    def predict_matches(self, division: Division) -> None:
        """Replace the stored matches with copies carrying predicted scores."""
        ratings = self.ratings.get(division.id)
        if not ratings:
            raise PredictorUnavailable(f"No performance ratings for {division.name}")

        try:
            predicted = [predict_match(m, ratings) for m in self.matches.get(division.id, [])]
        except (ArithmeticError, ValueError) as e:
            raise PredictionFailure(f"Could not predict matches for {division.name}: {e}") from e

        self.matches[division.id] = predicted
        logger.debug(
            "Predicted %d of %d matches for %s",
            sum(1 for m in predicted if m.predicted),
            len(predicted),
            division.name,
        )


def load_event(client: RobotEventsClient, sku: str) -> Event:
    """Look up an event by SKU.

    Raises:
        LookupError: If no event has that SKU.
    """
    data = client.get_event(sku)
    if data is None:
        raise LookupError(f"No event with SKU {sku}")
    return Event.from_json(data, client=client)
