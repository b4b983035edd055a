"""Failure types raised by the match data service and absorbed by the projector."""

from __future__ import annotations


class MatchDataError(Exception):
    """Base class for match data failures."""


class FetchFailure(MatchDataError):
    """The match list could not be fetched or parsed."""


class RatingsFailure(FetchFailure):
    """Team performance ratings could not be computed for a division."""


class PredictionFailure(MatchDataError):
    """The predictor ran but could not produce predictions."""


class PredictorUnavailable(PredictionFailure):
    """No performance ratings exist, so there is nothing to predict from."""
