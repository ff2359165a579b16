"""Core configuration and constants.

Uses environment variables for configuration. Follows PEP8 and Google style docstrings.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
import os

from pydantic import BaseModel


DATA_DIR = Path(os.getenv("WORKWELL_DATA_DIR") or Path(__file__).resolve().parent.parent / "data")

# Quality band thresholds (degrees of head pitch, negative = forward tilt)
POOR_POSTURE_THRESHOLD = -20.0
WARNING_THRESHOLD = -15.0


class Settings(BaseModel):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: App display name.
        environment: Runtime environment.
        api_host: Host for FastAPI server.
        api_port: Port for FastAPI server.
        log_level: Logging level string.
        database_url: SQLAlchemy URL of the session store.
        timezone: IANA zone used for calendar-day history filters.
        poor_posture_threshold: Pitch below which posture is poor.
        warning_threshold: Pitch below which posture is declining.
        smoothing_factor: Weight of a new sample in the low-pass filter.
        history_capacity: Size of the rolling pitch history.
        tick_interval: Seconds between session metric ticks.
        connect_timeout: Seconds to wait for the first sensor sample.
        motion_source: Which sensor adapter the API wires in.
        motion_sample_hz: Rate of the simulated sensor.
    """

    app_name: str = "Workwell Posture Tracker"
    environment: Literal["dev", "prod", "test"] = "dev"

    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    database_url: str = os.getenv("WORKWELL_DATABASE_URL", f"sqlite:///{DATA_DIR / 'workwell.db'}")
    timezone: str = os.getenv("WORKWELL_TIMEZONE", "UTC")

    # Posture classification
    poor_posture_threshold: float = float(os.getenv("POOR_POSTURE_THRESHOLD", str(POOR_POSTURE_THRESHOLD)))
    warning_threshold: float = float(os.getenv("WARNING_THRESHOLD", str(WARNING_THRESHOLD)))
    smoothing_factor: float = float(os.getenv("SMOOTHING_FACTOR", "0.2"))
    history_capacity: int = int(os.getenv("HISTORY_CAPACITY", "100"))

    # Session timing
    tick_interval: float = float(os.getenv("TICK_INTERVAL", "1.0"))
    connect_timeout: float = float(os.getenv("CONNECT_TIMEOUT", "10.0"))

    # Motion sensor
    motion_source: Literal["simulated", "push", "none"] = os.getenv("MOTION_SOURCE", "simulated")  # type: ignore[assignment]
    motion_sample_hz: float = float(os.getenv("MOTION_SAMPLE_HZ", "30"))

    # Security & CORS
    api_key: str | None = os.getenv("API_KEY")
    exposed_origins: list[str] = (
        os.getenv("EXPOSED_ORIGINS", "*").split(",") if os.getenv("EXPOSED_ORIGINS") else ["*"]
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
