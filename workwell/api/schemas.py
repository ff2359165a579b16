"""Pydantic schemas for request/response payloads.

All endpoints use a standardized JSON envelope: {"success": bool, "data": any, "error": str|None}
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Envelope(BaseModel):
    success: bool = True
    data: Optional[dict] = None
    error: Optional[str] = None


class AttitudeInput(BaseModel):
    # Radians, as reported by the headphone motion API
    pitch: float = Field(ge=-math.pi, le=math.pi, allow_inf_nan=False)
    roll: float = Field(default=0.0, ge=-math.pi, le=math.pi, allow_inf_nan=False)
    yaw: float = Field(default=0.0, ge=-math.pi, le=math.pi, allow_inf_nan=False)
    timestamp_utc: datetime | None = None


class MotionBatchInput(BaseModel):
    readings: List[AttitudeInput] = Field(min_length=1)


class MotionErrorInput(BaseModel):
    message: str = Field(min_length=1)


class LiveMetricsOutput(BaseModel):
    state: str
    pitch: float
    roll: float
    yaw: float
    is_connected: bool
    connection_status: str
    posture_quality: str
    quality_message: str
    recommendation: str
    pitch_history: List[float]
    poor_posture_duration: float
    session_duration: float
    poor_posture_percentage: int
    started_at: str | None = None
    last_error: str | None = None


class PostureSessionOutput(BaseModel):
    id: str
    start_time: str
    end_time: str
    total_duration: float
    poor_posture_duration: float
    good_posture_duration: float
    poor_posture_percentage: int
    average_pitch: float
    min_pitch: float
    max_pitch: float
    score: int
    duration_label: str


class TrendPointOutput(BaseModel):
    start_time: str
    poor_posture_percentage: int


class HistorySummaryOutput(BaseModel):
    timeframe: str
    session_count: int
    average_poor_posture: int
    total_session_time: float
    total_session_time_label: str
    average_session_duration: float
    average_session_duration_label: str
    best_session: PostureSessionOutput | None = None
    worst_session: PostureSessionOutput | None = None
    best_posture_score: int | None = None
    trend: List[TrendPointOutput]
