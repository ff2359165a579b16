"""Motion feed endpoints for companion devices streaming headphone attitude."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from loguru import logger

from workwell.api.schemas import Envelope, MotionBatchInput, MotionErrorInput
from workwell.tracking import AttitudeReading, PushMotionSource
from workwell.tracking.motion import MotionSourceError

router = APIRouter()


def _push_source(request: Request) -> PushMotionSource | None:
    source = getattr(request.app.state, "motion", None)
    return source if isinstance(source, PushMotionSource) else None


@router.post("/motion/samples", response_model=Envelope)
async def motion_samples(payload: MotionBatchInput, request: Request) -> Envelope:
    source = _push_source(request)
    if source is None:
        return Envelope(success=False, error="push_disabled")
    delivered = 0
    for r in payload.readings:
        reading = AttitudeReading(
            pitch=r.pitch,
            roll=r.roll,
            yaw=r.yaw,
            timestamp_utc=r.timestamp_utc or datetime.now(timezone.utc),
        )
        delivered += source.push(reading)
    return Envelope(
        success=True,
        data={"accepted": len(payload.readings), "delivered": delivered, "subscribers": source.subscriber_count},
    )


@router.post("/motion/error", response_model=Envelope)
async def motion_error(payload: MotionErrorInput, request: Request) -> Envelope:
    source = _push_source(request)
    if source is None:
        return Envelope(success=False, error="push_disabled")
    logger.warning("Companion reported motion error: {}", payload.message)
    delivered = source.fail(MotionSourceError(payload.message))
    return Envelope(success=True, data={"delivered": delivered})
