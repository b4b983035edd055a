"""Shared fixtures: match builders, a fake data service and a fake API client."""

from dataclasses import replace
from datetime import datetime

import pytest

from roboscout.data.models import Division, Match, Round, Team


def build_match(
    match_id: int,
    name: str = "Qualifier #1",
    red: tuple = (1, 2),
    blue: tuple = (3, 4),
    **fields,
) -> Match:
    return Match(
        id=match_id,
        name=name,
        red_alliance=(Team(red[0], f"{red[0]}A"), Team(red[1], f"{red[1]}A")),
        blue_alliance=(Team(blue[0], f"{blue[0]}A"), Team(blue[1], f"{blue[1]}A")),
        **fields,
    )


def match_payload(
    match_id: int,
    red: tuple = (1, 2),
    blue: tuple = (3, 4),
    red_score: int = 0,
    blue_score: int = 0,
    scored: bool = False,
    round: int = Round.QUALIFICATION,
    name: str | None = None,
    scheduled: str | None = "2024-03-02T09:30:00",
    started: str | None = None,
) -> dict:
    """A match object shaped like the RobotEvents API returns it."""

    def alliance(color, team_ids, score):
        return {
            "color": color,
            "score": score,
            "teams": [{"team": {"id": t, "name": f"{t}A"}, "sitting": False} for t in team_ids],
        }

    return {
        "id": match_id,
        "name": name or f"Qualifier #{match_id}",
        "round": int(round),
        "instance": 1,
        "matchnum": match_id,
        "field": "Field 1",
        "scheduled": scheduled,
        "started": started,
        "scored": scored,
        "alliances": [alliance("blue", blue, blue_score), alliance("red", red, red_score)],
    }


class FakeService:
    """In-memory stand-in for the event data service."""

    def __init__(self, matches, fetch_error=None, ratings_error=None, predict_error=None):
        self.remote = list(matches)
        self.stored: list[Match] = []
        self.fetch_error = fetch_error
        self.ratings_error = ratings_error
        self.predict_error = predict_error
        self.calls: list[str] = []

    def fetch_matches(self, division):
        self.calls.append("fetch")
        if self.fetch_error:
            raise self.fetch_error
        self.stored = list(self.remote)
        return list(self.stored)

    def calculate_team_performance_ratings(self, division):
        self.calls.append("ratings")
        if self.ratings_error:
            raise self.ratings_error

    def predict_matches(self, division):
        self.calls.append("predict")
        if self.predict_error:
            raise self.predict_error
        self.stored = [
            replace(m, predicted=True, predicted_red_score=m.id * 10, predicted_blue_score=m.id * 10 + 1)
            for m in self.stored
        ]

    def matches_for(self, division):
        return list(self.stored)


class FakeClient:
    """Stand-in for RobotEventsClient serving canned match payloads."""

    def __init__(self, matches=None, event=None, error=None):
        self.matches = matches or []
        self.event = event
        self.error = error
        self.match_requests = 0

    def get_event(self, sku):
        if self.event and self.event["sku"] == sku:
            return self.event
        return None

    def get_division_matches(self, event_id, division_id):
        self.match_requests += 1
        if self.error:
            raise self.error
        return list(self.matches)


@pytest.fixture
def division() -> Division:
    return Division(id=1, name="Science", order=1)


@pytest.fixture
def sample_matches() -> list[Match]:
    """One completed, one scheduled-only, one not yet played."""
    return [
        build_match(1, "Qualifier #1", scored=True, red_score=10, blue_score=20,
                    started=datetime(2024, 3, 2, 14, 5)),
        build_match(2, "Qualifier #2", red=(5, 6), blue=(7, 8),
                    scheduled=datetime(2024, 3, 2, 9, 30)),
        build_match(3, "Qualifier #3", red=(2, 5), blue=(4, 7)),
    ]


@pytest.fixture
def event_payload() -> dict:
    return {
        "id": 501,
        "sku": "RE-VRC-24-0001",
        "name": "Test Signature Event",
        "divisions": [
            {"id": 2, "name": "Technology", "order": 2},
            {"id": 1, "name": "Science", "order": 1},
        ],
    }


@pytest.fixture
def played_payloads() -> list[dict]:
    """Three scored qualifiers with exact OPRs 10/20/30/40, plus one upcoming."""
    return [
        match_payload(1, red=(1, 2), blue=(3, 4), red_score=30, blue_score=70, scored=True),
        match_payload(2, red=(1, 3), blue=(2, 4), red_score=40, blue_score=60, scored=True),
        match_payload(3, red=(1, 4), blue=(2, 3), red_score=50, blue_score=50, scored=True),
        match_payload(4, red=(1, 2), blue=(3, 4)),
    ]
