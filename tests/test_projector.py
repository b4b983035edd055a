"""
Tests for MatchRowProjector refresh/predict lifecycle and publication.
"""

import threading

import pytest

from roboscout.matches.errors import (
    FetchFailure,
    PredictionFailure,
    PredictorUnavailable,
    RatingsFailure,
)
from roboscout.matches.projection import Side
from roboscout.matches.projector import MatchRowProjector, PredictionState, ProjectorEvent

from conftest import FakeService, build_match


def record_events(projector):
    events = []
    projector.subscribe(lambda event, snapshot: events.append((event, snapshot)))
    return events


def test_initial_snapshot_is_loading_and_empty(division, sample_matches):
    projector = MatchRowProjector(FakeService(sample_matches), division)

    assert projector.loading()
    assert projector.rows() == ()
    assert projector.snapshot().version == 0


def test_refresh_publishes_rows_before_clearing_loading(division, sample_matches):
    service = FakeService(sample_matches)
    projector = MatchRowProjector(service, division)
    events = record_events(projector)

    assert projector.refresh()

    assert service.calls == ["fetch", "ratings"]
    assert [e for e, _ in events] == [ProjectorEvent.ROWS_CHANGED, ProjectorEvent.LOADING_CHANGED]
    ready = events[-1][1]
    assert not ready.loading
    assert len(ready.rows) == 3
    assert not projector.loading()
    assert [r.display_name for r in projector.rows()] == ["Q1", "Q2", "Q3"]


def test_score_queries(division, sample_matches):
    projector = MatchRowProjector(FakeService(sample_matches), division)
    projector.refresh()

    assert projector.score_for(0, Side.RED) == "10"
    assert projector.score_for(0, "blue") == "20"
    assert projector.score_for(1, Side.RED) == ""
    assert not projector.is_predicted(0)


def test_ratings_failure_keeps_matches_and_disables_predictions(division, sample_matches):
    service = FakeService(sample_matches)
    projector = MatchRowProjector(service, division)
    projector.refresh(predict=True)
    assert projector.predictions_enabled

    service.ratings_error = RatingsFailure("singular matrix")
    projector.refresh(predict=True)

    snapshot = projector.snapshot()
    assert len(snapshot.rows) == 3
    assert not any(row.is_predicted for row in snapshot.rows)
    assert not snapshot.predictions_enabled
    assert snapshot.prediction_state == PredictionState.OFF
    assert isinstance(snapshot.last_error, RatingsFailure)
    assert service.calls[-2:] == ["fetch", "ratings"]


def test_fetch_failure_falls_back_to_last_known_matches(division, sample_matches):
    service = FakeService(sample_matches)
    projector = MatchRowProjector(service, division)
    projector.refresh(predict=True)

    service.fetch_error = FetchFailure("timeout")
    assert projector.refresh()

    snapshot = projector.snapshot()
    assert len(snapshot.rows) == 3
    assert not snapshot.predictions_enabled
    assert not snapshot.loading
    assert isinstance(snapshot.last_error, FetchFailure)


def test_fetch_failure_without_history_yields_empty_rows(division, sample_matches):
    service = FakeService(sample_matches, fetch_error=FetchFailure("offline"))
    projector = MatchRowProjector(service, division)

    projector.refresh()

    assert projector.snapshot().is_empty
    assert not projector.loading()
    assert "ratings" not in service.calls


def test_predict_turns_overlay_on(division, sample_matches):
    projector = MatchRowProjector(FakeService(sample_matches), division)
    projector.refresh()
    events = record_events(projector)

    assert projector.predict()

    snapshot = projector.snapshot()
    assert snapshot.predictions_enabled
    assert snapshot.prediction_state == PredictionState.ON
    assert all(row.is_predicted for row in snapshot.rows)
    assert projector.score_for(2, Side.RED) == "30"
    assert projector.score_for(2, Side.BLUE) == "31"
    states = [s.prediction_state for e, s in events if e == ProjectorEvent.PREDICTIONS_CHANGED]
    assert states == [PredictionState.CALCULATING, PredictionState.ON]


def test_predict_failure_leaves_rows_untouched(division, sample_matches):
    service = FakeService(sample_matches, predict_error=PredictionFailure("model crashed"))
    projector = MatchRowProjector(service, division)
    projector.refresh()
    rows_before = projector.rows()

    assert projector.predict()

    snapshot = projector.snapshot()
    assert snapshot.rows is rows_before
    assert not snapshot.predictions_enabled
    assert snapshot.prediction_state == PredictionState.OFF
    assert isinstance(snapshot.last_error, PredictionFailure)


def test_predictor_unavailable_is_distinguished(division, sample_matches):
    service = FakeService(sample_matches, predict_error=PredictorUnavailable("no ratings"))
    projector = MatchRowProjector(service, division)

    projector.refresh(predict=True)

    snapshot = projector.snapshot()
    assert isinstance(snapshot.last_error, PredictorUnavailable)
    assert not snapshot.predictions_enabled
    assert len(snapshot.rows) == 3


def test_predict_failure_keeps_existing_overlay(division, sample_matches):
    service = FakeService(sample_matches)
    projector = MatchRowProjector(service, division)
    projector.refresh(predict=True)
    rows_before = projector.rows()

    service.predict_error = PredictionFailure("flaky")
    projector.predict()

    assert projector.predictions_enabled
    assert projector.snapshot().prediction_state == PredictionState.ON
    assert projector.rows() is rows_before


def test_disable_predictions_restores_pre_toggle_rows(division, sample_matches):
    projector = MatchRowProjector(FakeService(sample_matches), division)
    projector.refresh()
    before = projector.rows()

    projector.predict()
    assert projector.score_for(1, Side.RED) == "20"

    projector.disable_predictions()

    assert projector.rows() == before
    assert projector.score_for(1, Side.RED) == ""
    assert projector.snapshot().prediction_state == PredictionState.OFF


def test_refresh_without_predict_keeps_flag(division, sample_matches):
    service = FakeService(sample_matches)
    projector = MatchRowProjector(service, division)
    projector.refresh(predict=True)

    projector.refresh()

    # Fresh matches carry no predictions, so nothing is shown as predicted
    assert projector.predictions_enabled
    assert not any(row.is_predicted for row in projector.rows())


def test_publication_goes_through_dispatch(division, sample_matches):
    pending = []
    projector = MatchRowProjector(FakeService(sample_matches), division, dispatch=pending.append)

    projector.refresh()

    assert projector.snapshot().version == 0
    assert len(pending) == 2

    for publish in pending:
        publish()

    assert projector.snapshot().version == 2
    assert len(projector.rows()) == 3
    assert not projector.loading()


def test_concurrent_refresh_is_dropped(division, sample_matches):
    started = threading.Event()
    release = threading.Event()

    class SlowService(FakeService):
        def fetch_matches(self, division):
            started.set()
            release.wait(timeout=5)
            return super().fetch_matches(division)

    service = SlowService(sample_matches)
    projector = MatchRowProjector(service, division)
    results = []
    worker = threading.Thread(target=lambda: results.append(projector.refresh()))
    worker.start()

    assert started.wait(timeout=5)
    assert projector.busy
    assert projector.refresh() is False
    assert projector.predict() is False

    release.set()
    worker.join(timeout=5)

    assert results == [True]
    assert service.calls.count("fetch") == 1
    assert not projector.busy
    assert projector.refresh()


def test_disable_during_refresh_with_predict_wins(division, sample_matches):
    started = threading.Event()
    release = threading.Event()

    class SlowPredictService(FakeService):
        def predict_matches(self, division):
            started.set()
            release.wait(timeout=5)
            super().predict_matches(division)

    projector = MatchRowProjector(SlowPredictService(sample_matches), division)
    worker = threading.Thread(target=lambda: projector.refresh(predict=True))
    worker.start()

    assert started.wait(timeout=5)
    projector.disable_predictions()
    assert not projector.predictions_enabled

    release.set()
    worker.join(timeout=5)

    snapshot = projector.snapshot()
    assert not snapshot.predictions_enabled
    assert snapshot.prediction_state == PredictionState.OFF
    assert not any(row.is_predicted for row in snapshot.rows)

    assert projector.predict()
    assert projector.predictions_enabled


def test_negative_row_index_is_rejected(division, sample_matches):
    projector = MatchRowProjector(FakeService(sample_matches), division)
    projector.refresh()

    with pytest.raises(IndexError):
        projector.score_for(-1, Side.RED)
    with pytest.raises(IndexError):
        projector.is_predicted(-3)


def test_unsubscribe_stops_notifications(division, sample_matches):
    projector = MatchRowProjector(FakeService(sample_matches), division)
    events = []
    unsubscribe = projector.subscribe(lambda event, snapshot: events.append(event))

    unsubscribe()
    projector.refresh()

    assert events == []


def test_team_numbers_cover_both_alliances(division):
    projector = MatchRowProjector(FakeService([build_match(1, red=(10, 11), blue=(12, 13))]), division)
    projector.refresh()

    assert projector.snapshot().team_numbers == {10: "10A", 11: "11A", 12: "12A", 13: "13A"}
