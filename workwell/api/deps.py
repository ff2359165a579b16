"""Request-scoped accessors for the objects ``create_app`` wires onto app.state."""
from __future__ import annotations

from datetime import tzinfo
from zoneinfo import ZoneInfo

from fastapi import Header, HTTPException, Request

from workwell.api.schemas import HistorySummaryOutput, PostureSessionOutput
from workwell.core.config import Settings
from workwell.history import HistorySummary, format_duration, format_duration_compact, session_score
from workwell.tracking import PostureSession, SessionLifecycleManager
from workwell.tracking.store import SessionStore


def get_manager(request: Request) -> SessionLifecycleManager:
    return request.app.state.manager


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_timezone(request: Request) -> tzinfo:
    return ZoneInfo(get_app_settings(request).timezone)


def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> None:
    s = get_app_settings(request)
    if getattr(s, "api_key", None) and x_api_key != s.api_key:
        raise HTTPException(status_code=401, detail="invalid_api_key")


def session_payload(session: PostureSession) -> dict:
    data = session.to_dict()
    data["score"] = session_score(session)
    data["duration_label"] = format_duration(session.total_duration)
    return PostureSessionOutput.model_validate(data).model_dump()


def summary_payload(summary: HistorySummary) -> dict:
    data = summary.to_dict()
    data["best_session"] = session_payload(summary.best_session) if summary.best_session else None
    data["worst_session"] = session_payload(summary.worst_session) if summary.worst_session else None
    data["total_session_time_label"] = format_duration_compact(summary.total_session_time)
    data["average_session_duration_label"] = format_duration_compact(summary.average_session_duration)
    return HistorySummaryOutput.model_validate(data).model_dump()
