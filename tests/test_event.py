"""
Tests for Match parsing and the Event data service.
"""

from datetime import datetime, timedelta, timezone

import pytest

from roboscout.data.event import Event, load_event
from roboscout.data.models import Match
from roboscout.data.robotevents_client import RobotEventsError
from roboscout.matches.errors import FetchFailure, PredictorUnavailable, RatingsFailure
from roboscout.matches.projector import MatchRowProjector

from conftest import FakeClient, match_payload


def test_match_from_json_orders_alliances_by_color():
    match = Match.from_json(
        match_payload(7, red=(11, 12), blue=(13, 14), red_score=5, blue_score=9, scored=True,
                      started="2024-03-02T14:05:00-05:00")
    )

    assert [t.id for t in match.red_alliance] == [11, 12]
    assert [t.number for t in match.blue_alliance] == ["13A", "14A"]
    assert (match.red_score, match.blue_score) == (5, 9)
    assert match.completed()
    assert match.started == datetime(2024, 3, 2, 14, 5, tzinfo=timezone(timedelta(hours=-5)))


def test_match_from_json_accepts_utc_suffix():
    match = Match.from_json(match_payload(1, scheduled="2024-03-02T09:30:00Z"))
    assert match.scheduled == datetime(2024, 3, 2, 9, 30, tzinfo=timezone.utc)


def test_match_from_json_rejects_short_alliance():
    payload = match_payload(1)
    payload["alliances"][0]["teams"].pop()

    with pytest.raises(ValueError, match="expected 2"):
        Match.from_json(payload)


def test_unscored_match_with_zero_scores_is_not_completed():
    match = Match.from_json(match_payload(1, started="2024-03-02T09:31:00"))
    assert not match.completed()


def test_event_from_json_sorts_divisions(event_payload):
    event = Event.from_json(event_payload)

    assert [d.name for d in event.divisions] == ["Science", "Technology"]
    assert event.division(2).name == "Technology"
    with pytest.raises(KeyError):
        event.division(99)


def test_fetch_matches_stores_api_order(event_payload, played_payloads):
    event = Event.from_json(event_payload, client=FakeClient(matches=played_payloads))
    division = event.division(1)

    matches = event.fetch_matches(division)

    assert [m.id for m in matches] == [1, 2, 3, 4]
    assert event.matches_for(division) == matches


def test_fetch_errors_become_fetch_failures(event_payload, played_payloads):
    event = Event.from_json(event_payload, client=FakeClient(error=RobotEventsError(500, "boom")))
    with pytest.raises(FetchFailure, match="boom"):
        event.fetch_matches(event.division(1))

    broken = dict(played_payloads[0], alliances=[])
    event = Event.from_json(event_payload, client=FakeClient(matches=[broken]))
    with pytest.raises(FetchFailure, match="Malformed"):
        event.fetch_matches(event.division(1))


def test_event_without_client_cannot_fetch(event_payload):
    event = Event.from_json(event_payload)
    with pytest.raises(FetchFailure, match="no API client"):
        event.fetch_matches(event.division(1))


def test_predict_without_ratings_is_unavailable(event_payload, played_payloads):
    event = Event.from_json(event_payload, client=FakeClient(matches=played_payloads[:1]))
    division = event.division(1)
    event.fetch_matches(division)

    with pytest.raises(RatingsFailure):
        event.calculate_team_performance_ratings(division)
    with pytest.raises(PredictorUnavailable):
        event.predict_matches(division)


def test_ratings_failure_drops_stale_ratings(event_payload, played_payloads):
    client = FakeClient(matches=played_payloads)
    event = Event.from_json(event_payload, client=client)
    division = event.division(1)
    event.fetch_matches(division)
    event.calculate_team_performance_ratings(division)
    assert division.id in event.ratings

    client.matches = played_payloads[:1]
    event.fetch_matches(division)
    with pytest.raises(RatingsFailure):
        event.calculate_team_performance_ratings(division)

    assert division.id not in event.ratings


def test_predict_matches_replaces_stored_matches(event_payload, played_payloads):
    event = Event.from_json(event_payload, client=FakeClient(matches=played_payloads))
    division = event.division(1)
    fetched = event.fetch_matches(division)
    event.calculate_team_performance_ratings(division)

    event.predict_matches(division)

    predicted = event.matches_for(division)
    assert not fetched[3].predicted
    assert predicted[3].predicted
    assert (predicted[3].predicted_red_score, predicted[3].predicted_blue_score) == (30, 70)


def test_projector_over_event(event_payload, played_payloads):
    event = Event.from_json(event_payload, client=FakeClient(matches=played_payloads))
    projector = MatchRowProjector(event, event.division(1))

    projector.refresh(predict=True)

    rows = projector.rows()
    assert projector.predictions_enabled
    assert [r.display_name for r in rows] == ["Q1", "Q2", "Q3", "Q4"]
    assert (rows[3].red_score_display, rows[3].blue_score_display) == (30, 70)
    assert rows[3].time_label == "9:30 AM"


def test_load_event_by_sku(event_payload):
    client = FakeClient(event=event_payload)

    event = load_event(client, "RE-VRC-24-0001")

    assert event.id == 501
    assert event.client is client
    with pytest.raises(LookupError):
        load_event(client, "RE-VRC-00-0000")
