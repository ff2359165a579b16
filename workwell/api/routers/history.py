"""Session history endpoints: listing, summaries, deletion and CSV export."""
from __future__ import annotations

from datetime import datetime, timezone, tzinfo

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from loguru import logger

from workwell.api.deps import get_store, get_timezone, require_api_key, session_payload, summary_payload
from workwell.api.schemas import Envelope
from workwell.history import Timeframe, export_csv, filter_sessions, summarize
from workwell.history.aggregator import sort_for_display
from workwell.tracking.store import SessionStore

router = APIRouter()


def _now() -> datetime:
    return datetime.now(timezone.utc)


@router.get("/history/sessions", response_model=Envelope)
def history_sessions(
    timeframe: Timeframe = Query(Timeframe.WEEK),
    store: SessionStore = Depends(get_store),
    tz: tzinfo = Depends(get_timezone),
) -> Envelope:
    rows = sort_for_display(filter_sessions(store.list_all(), timeframe, _now(), tz))
    items = [session_payload(s) for s in rows]
    return Envelope(success=True, data={"timeframe": timeframe.value, "sessions": items, "count": len(items)})


@router.get("/history/summary", response_model=Envelope)
def history_summary(
    timeframe: Timeframe = Query(Timeframe.WEEK),
    store: SessionStore = Depends(get_store),
    tz: tzinfo = Depends(get_timezone),
) -> Envelope:
    summary = summarize(store.list_all(), timeframe, _now(), tz)
    return Envelope(success=True, data=summary_payload(summary))


@router.delete("/history/sessions/{session_id}", response_model=Envelope, dependencies=[Depends(require_api_key)])
def history_delete(session_id: str, store: SessionStore = Depends(get_store)) -> Envelope:
    if not store.delete(session_id):
        return Envelope(success=False, error="session_not_found")
    logger.info("Deleted posture session {}", session_id)
    return Envelope(success=True, data={"deleted": session_id})


@router.delete("/history/sessions", response_model=Envelope, dependencies=[Depends(require_api_key)])
def history_clear(store: SessionStore = Depends(get_store)) -> Envelope:
    count = store.delete_all()
    logger.info("Cleared {} posture sessions", count)
    return Envelope(success=True, data={"deleted": count})


@router.get("/history/export")
def history_export(
    store: SessionStore = Depends(get_store),
    tz: tzinfo = Depends(get_timezone),
) -> Response:
    body = export_csv(sort_for_display(store.list_all()), tz)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=posture_sessions.csv"},
    )
