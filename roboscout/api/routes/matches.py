"""Match list endpoints - rows for one event division, refresh and predictions."""

from __future__ import annotations

import requests
from fastapi import APIRouter, HTTPException, Request

from roboscout.data.robotevents_client import RobotEventsError
from roboscout.matches.projector import MatchRowProjector

from ..models import MatchList
from ..services.projector_registry import ProjectorRegistry

router = APIRouter(prefix="/api/events", tags=["matches"])


def get_registry(request: Request) -> ProjectorRegistry:
    return request.app.state.registry


def get_projector(request: Request, sku: str, division_id: int) -> MatchRowProjector:
    try:
        return get_registry(request).get(sku, division_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0] if e.args else e))
    except (requests.RequestException, RobotEventsError) as e:
        raise HTTPException(status_code=502, detail=f"RobotEvents unavailable: {e}")


@router.get("/{sku}/divisions/{division_id}/matches")
def get_matches(sku: str, division_id: int, request: Request) -> MatchList:
    """Return the last published rows; loads them on first request."""
    projector = get_projector(request, sku, division_id)
    if projector.snapshot().version == 0:
        projector.refresh()
    return MatchList.from_snapshot(sku, projector.snapshot())


@router.post("/{sku}/divisions/{division_id}/refresh")
def refresh_matches(sku: str, division_id: int, request: Request, predict: bool = False) -> MatchList:
    projector = get_projector(request, sku, division_id)
    if not projector.refresh(predict=predict):
        raise HTTPException(status_code=409, detail="A refresh is already running for this division")
    return MatchList.from_snapshot(sku, projector.snapshot())


@router.post("/{sku}/divisions/{division_id}/predictions")
def enable_predictions(sku: str, division_id: int, request: Request) -> MatchList:
    projector = get_projector(request, sku, division_id)
    if not projector.predict():
        raise HTTPException(status_code=409, detail="A refresh is already running for this division")
    return MatchList.from_snapshot(sku, projector.snapshot())


@router.delete("/{sku}/divisions/{division_id}/predictions")
def disable_predictions(sku: str, division_id: int, request: Request) -> MatchList:
    projector = get_projector(request, sku, division_id)
    projector.disable_predictions()
    return MatchList.from_snapshot(sku, projector.snapshot())
