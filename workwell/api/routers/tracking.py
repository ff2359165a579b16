"""Tracking control endpoints.

Start/stop/retry/cancel a posture session and read the live metrics. Handlers
are async so they run on the event loop that also delivers sensor samples
and ticks.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from loguru import logger

from workwell.api.deps import get_manager, session_payload
from workwell.api.schemas import Envelope, LiveMetricsOutput
from workwell.tracking import SessionLifecycleManager, TrackingError

router = APIRouter()


def _status(manager: SessionLifecycleManager) -> dict:
    return LiveMetricsOutput.model_validate(manager.snapshot().to_dict()).model_dump()


@router.post("/tracking/start", response_model=Envelope)
async def tracking_start(manager: SessionLifecycleManager = Depends(get_manager)) -> Envelope:
    try:
        manager.start_tracking()
    except TrackingError as exc:
        logger.info("Tracking start rejected: {}", exc)
        return Envelope(success=False, data=_status(manager), error=exc.code)
    return Envelope(success=True, data=_status(manager))


@router.post("/tracking/stop", response_model=Envelope)
async def tracking_stop(manager: SessionLifecycleManager = Depends(get_manager)) -> Envelope:
    record = manager.stop_tracking()
    saved = record is not None and manager.last_error != "storage_failure"
    return Envelope(
        success=True,
        data={
            "session": session_payload(record) if record else None,
            "saved": saved,
            "status": _status(manager),
        },
    )


@router.post("/tracking/retry", response_model=Envelope)
async def tracking_retry(manager: SessionLifecycleManager = Depends(get_manager)) -> Envelope:
    try:
        manager.retry()
    except TrackingError as exc:
        return Envelope(success=False, data=_status(manager), error=exc.code)
    return Envelope(success=True, data=_status(manager))


@router.post("/tracking/cancel", response_model=Envelope)
async def tracking_cancel(manager: SessionLifecycleManager = Depends(get_manager)) -> Envelope:
    try:
        manager.cancel()
    except TrackingError as exc:
        return Envelope(success=False, data=_status(manager), error=exc.code)
    return Envelope(success=True, data=_status(manager))


@router.get("/tracking/status", response_model=Envelope)
async def tracking_status(manager: SessionLifecycleManager = Depends(get_manager)) -> Envelope:
    return Envelope(success=True, data=_status(manager))
