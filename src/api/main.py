"""FastAPI application for image schedule computation.

This module provides the main FastAPI application with endpoints for:
- GET /health: Service health check
- POST /schedule: Full schedule (per-item windows, slots, segments)
- POST /schedule/visible: What is on screen at one probe time

Example:
    Run with uvicorn:

    $ uvicorn src.api.main:app --host 0.0.0.0 --port 8000
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imageschedule import (
    Schedule,
    ScheduleConfig,
    Segment,
    resolve_timestamps,
    segment_at,
    to_epoch_ms,
    visible_at,
)

from .config import Settings, get_settings
from .deps import build_schedule_config, get_schedule_cache, init_schedule_cache
from .errors import InvalidInputError, register_exception_handlers
from .logging import add_middleware, setup_logging
from .schemas import (
    HealthResponse,
    ItemMetadataSchema,
    ScheduleRequest,
    ScheduleResponse,
    SegmentSchema,
    VisibleEntrySchema,
    VisibleRequest,
    VisibleResponse,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events.

    Startup:
        - Initialize logging
        - Create the shared schedule cache
    """
    settings = get_settings()

    setup_logging(settings.log_level)
    logger.info(
        "Starting %s v%s",
        settings.app_name,
        settings.app_version,
    )

    init_schedule_cache(settings)
    logger.info("Application startup complete")

    yield

    cache = get_schedule_cache()
    logger.info("Application shutdown: cache=%s", cache.stats())
    cache.clear()


# =============================================================================
# Application Factory
# =============================================================================


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Image Schedule API - Compute visibility windows, slot layouts and composition segments for timestamped photos.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Add CORS middleware (allow all in development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_middleware(app)
    register_exception_handlers(app)
    register_routes(app)

    return app


# =============================================================================
# Request Helpers
# =============================================================================


def _request_times(request: ScheduleRequest) -> tuple[list[float | None], list[str | None]]:
    """Resolve the instant and its source for every request item.

    Without resolve_missing, items lacking an instant stay None and end up
    hidden. With it, they are synthesized from their neighbours.
    """
    captured = [
        to_epoch_ms(item.time_ms) if item.time_ms is not None else to_epoch_ms(item.captured_at)
        for item in request.items
    ]

    if not request.resolve_missing:
        sources = ["captured" if value is not None else None for value in captured]
        return captured, sources

    resolved = resolve_timestamps(
        captured,
        fallbacks=[item.fallback_ms for item in request.items],
    )
    return [r.time_ms for r in resolved], [r.source for r in resolved]


def _compute(request: ScheduleRequest) -> tuple[Schedule, ScheduleConfig, list[float | None], list[str | None]]:
    """Validate the request and compute (or fetch) its schedule."""
    if not request.items:
        raise InvalidInputError(
            message="items must not be empty",
            details={"item_count": 0},
        )

    config = build_schedule_config(request.config)
    times, sources = _request_times(request)

    start_time = time.perf_counter()
    schedule = get_schedule_cache().get_or_compute(times, config)
    schedule_ms = (time.perf_counter() - start_time) * 1000

    logger.info(
        "Schedule ready: items=%d visible=%d segments=%d schedule_ms=%.2f",
        len(times),
        schedule.visible_count,
        schedule.segment_count,
        schedule_ms,
    )
    return schedule, config, times, sources


def _segment_schema(segment: Segment) -> SegmentSchema:
    return SegmentSchema(
        start_ms=segment.start_ms,
        end_ms=segment.end_ms,
        layout_size=segment.layout_size,
        slots=list(segment.slots),
    )


def register_routes(app: FastAPI) -> None:
    """Register all API routes on the application.

    Args:
        app: The FastAPI application.
    """

    # =========================================================================
    # Health Endpoint
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
        description="Check service health and scheduling defaults.",
    )
    async def health() -> HealthResponse:
        settings = get_settings()
        return HealthResponse(
            status="ok",
            app_version=settings.app_version,
            default_max_slots=settings.default_max_slots,
        )

    # =========================================================================
    # Schedule Endpoint
    # =========================================================================

    @app.post(
        "/schedule",
        response_model=ScheduleResponse,
        tags=["Schedule"],
        summary="Compute an image schedule",
        description="Compute visibility windows, slot assignments and composition segments.",
    )
    async def schedule(request: ScheduleRequest) -> ScheduleResponse:
        """Compute the schedule for the posted items.

        Returns:
            ScheduleResponse with per-item metadata and segments.
        """
        result, config, times, sources = _compute(request)

        metadata = [
            ItemMetadataSchema(
                index=index,
                visible=meta.visible,
                reason=None if meta.visible else meta.reason,
                time_ms=times[index],
                time_source=sources[index],
                start_ms=meta.start_ms,
                end_ms=meta.end_ms,
                slot_index=meta.slot_index,
                max_concurrency=meta.max_concurrency,
            )
            for index, meta in enumerate(result.metadata)
        ]

        return ScheduleResponse(
            item_count=len(result.metadata),
            visible_count=result.visible_count,
            metadata=metadata,
            segments=[_segment_schema(segment) for segment in result.segments],
            min_start_ms=result.min_start_ms,
            max_end_ms=result.max_end_ms,
            config=config.to_dict(),
        )

    # =========================================================================
    # Visible-at Endpoint
    # =========================================================================

    @app.post(
        "/schedule/visible",
        response_model=VisibleResponse,
        tags=["Schedule"],
        summary="Items visible at a probe time",
        description="Return the items on screen and the composition segment at probe_ms.",
    )
    async def schedule_visible(request: VisibleRequest) -> VisibleResponse:
        result, _, _, _ = _compute(request)

        entries = [
            VisibleEntrySchema(**entry.to_dict())
            for entry in visible_at(result, request.probe_ms, force=request.force)
        ]
        segment = segment_at(result, request.probe_ms)

        return VisibleResponse(
            probe_ms=request.probe_ms,
            entries=entries,
            segment=_segment_schema(segment) if segment is not None else None,
        )


# =============================================================================
# Application Instance
# =============================================================================


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
