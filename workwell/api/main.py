"""FastAPI application exposing the posture tracker to UI clients.

Endpoints:
- /tracking/*: start/stop/retry/cancel and live metrics
- /motion/*: attitude feed when the push sensor is configured
- /history/*: stored sessions, summaries, deletion and CSV export

``create_app`` wires settings, the session store, the motion source and the
scheduler onto ``app.state``; run it with uvicorn's ``--factory`` flag.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from workwell.api.routers.history import router as history_router
from workwell.api.routers.motion import router as motion_router
from workwell.api.routers.tracking import router as tracking_router
from workwell.core.config import DATA_DIR, Settings, get_settings
from workwell.core.db import create_db_engine, init_db, make_session_factory
from workwell.core.logging_config import add_file_sink
from workwell.tracking import (
    PushMotionSource,
    SessionAccumulator,
    SessionLifecycleManager,
    SimulatedMotionSource,
    TrackingState,
)
from workwell.tracking.motion import MotionSource, UnavailableMotionSource
from workwell.tracking.scheduler import AsyncioScheduler, Scheduler
from workwell.tracking.store import SessionStore, SqlSessionStore


def build_motion_source(settings: Settings) -> MotionSource:
    if settings.motion_source == "push":
        return PushMotionSource()
    if settings.motion_source == "none":
        return UnavailableMotionSource()
    return SimulatedMotionSource(sample_hz=settings.motion_sample_hz)


def build_store(settings: Settings) -> SqlSessionStore:
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    return SqlSessionStore(make_session_factory(engine))


def build_manager(
    settings: Settings,
    motion: MotionSource,
    store: SessionStore,
    scheduler: Scheduler,
) -> SessionLifecycleManager:
    accumulator = SessionAccumulator(
        smoothing_factor=settings.smoothing_factor,
        history_capacity=settings.history_capacity,
        poor_threshold=settings.poor_posture_threshold,
        warning_threshold=settings.warning_threshold,
    )
    return SessionLifecycleManager(
        motion=motion,
        store=store,
        scheduler=scheduler,
        accumulator=accumulator,
        tick_interval=settings.tick_interval,
        connect_timeout=settings.connect_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    sink_id = add_file_sink(Path(DATA_DIR) / "logs", settings.log_level)
    logger.info("{} ready (motion_source={})", settings.app_name, settings.motion_source)
    yield
    # Shutdown: close out a running session so it is not lost
    manager: SessionLifecycleManager = app.state.manager
    if manager.state is not TrackingState.IDLE:
        manager.stop_tracking()
    logger.remove(sink_id)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SessionStore] = None,
    motion: Optional[MotionSource] = None,
    scheduler: Optional[Scheduler] = None,
) -> FastAPI:
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)
    motion = motion if motion is not None else build_motion_source(settings)
    scheduler = scheduler or AsyncioScheduler()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.motion = motion
    app.state.manager = build_manager(settings, motion, store, scheduler)

    # CORS for mobile app dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.exposed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict:
        """Return API health status."""

        return {"status": "ok"}

    app.include_router(tracking_router, prefix="", tags=["tracking"])
    app.include_router(motion_router, prefix="", tags=["motion"])
    app.include_router(history_router, prefix="", tags=["history"])
    return app
