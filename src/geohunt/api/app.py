# src/geohunt/api/app.py
"""
FastAPI application wiring.

`create_app()` builds the `HuntService`, installs error handlers/CORS/timing, and
refreshes the question index during startup so no request is served against an
empty index. Business logic lives in `geohunt.engine`.

Run with: `uvicorn geohunt.api.app:create_app --factory` (or `geohunt serve`).
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from geohunt.config.settings import Settings, get_settings
from geohunt.core.logging import configure_logging
from geohunt.domain.errors import HuntError, Rejection
from geohunt.engine.service import HuntService, build_service

from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    service: HuntService = app.state.hunt
    # RefreshError propagates and aborts startup.
    count = service.start()
    if not service.settings.auth.operator_ids:
        logger.warning("No operator ids configured; admin endpoints are disabled.")
    logger.info("Serving %s question(s) with radius=%sm", count, service.settings.game.radius_m)
    yield


def create_app(settings: Settings | None = None, *, service: HuntService | None = None) -> FastAPI:
    settings = settings or (service.settings if service else get_settings())
    service = service or build_service(settings)
    configure_logging(settings, buffer=service.log_buffer)

    app = FastAPI(title="GeoHunt API", version="0.1.0", lifespan=_lifespan)
    app.state.hunt = service

    if settings.cors.origins or settings.cors.allow_origin_regex:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors.origins,
            allow_origin_regex=settings.cors.allow_origin_regex or None,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Only known routes are timed, so probing random paths cannot grow the table.
    timed_paths = {route.path for route in router.routes}

    @app.middleware("http")
    async def _record_timing(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path in timed_paths:
            service.perf.record(request.url.path, (time.perf_counter() - start) * 1000.0)
        return response

    @app.exception_handler(HuntError)
    async def _hunt_error(request: Request, exc: HuntError) -> JSONResponse:
        if not isinstance(exc, Rejection):
            logger.warning("%s on %s: %s", exc.code, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    app.include_router(router)
    return app
