"""Pydantic schemas for API request/response models.

This module defines all the request and response schemas used by the
API endpoints, ensuring consistent serialization and validation.

Example:
    >>> from src.api.schemas import ScheduleRequest
    >>> request = ScheduleRequest(items=[{"time_ms": 0}, {"time_ms": 8000}])
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from imageschedule.constants import MAX_SLOTS_LIMIT


# =============================================================================
# Health Endpoint
# =============================================================================


class HealthResponse(BaseModel):
    """Response schema for /health endpoint."""

    status: str = Field(
        default="ok",
        description="Service status",
        examples=["ok"],
    )
    app_version: str = Field(
        description="Service version",
        examples=["1.0.0"],
    )
    default_max_slots: int = Field(
        ge=1,
        description="Slot count applied when a request omits max_slots",
        examples=[4],
    )


# =============================================================================
# Schedule Requests
# =============================================================================


class ScheduleItemSchema(BaseModel):
    """A single photo to schedule.

    time_ms wins over captured_at when both are given. fallback_ms is only
    consulted when resolve_missing is set.
    """

    time_ms: float | None = Field(
        default=None,
        description="Capture instant in ms since epoch",
        examples=[1700000000000],
    )
    captured_at: datetime | None = Field(
        default=None,
        description="Capture instant as an ISO 8601 datetime (naive means UTC)",
        examples=["2024-05-01T12:00:00Z"],
    )
    fallback_ms: float | None = Field(
        default=None,
        description="Non-authoritative hint such as file modification time",
    )


class ScheduleConfigSchema(BaseModel):
    """Optional overrides for scheduling parameters."""

    min_visible_ms: float | None = Field(
        default=None,
        description="Minimum display duration (floored at 1000)",
        examples=[3000],
    )
    hold_ms: float | None = Field(
        default=None,
        description="Hold extension (clamped to [0, 180000])",
        examples=[45000],
    )
    max_slots: int | None = Field(
        default=None,
        le=MAX_SLOTS_LIMIT,
        description=f"Concurrent display slots (floored at 1, at most {MAX_SLOTS_LIMIT})",
        examples=[4],
    )
    composition_interval_ms: float | None = Field(
        default=None,
        description="Minimum time between composition changes (floored at 500)",
        examples=[2000],
    )
    snap_to_grid: bool | None = Field(
        default=None,
        description="Round instants to snap_grid_ms",
    )
    snap_grid_ms: float | None = Field(
        default=None,
        description="Grid step in ms",
        examples=[1000],
    )


class ScheduleRequest(BaseModel):
    """Request schema for /schedule."""

    items: list[ScheduleItemSchema] = Field(
        description="Photos in caller order",
    )
    config: ScheduleConfigSchema | None = Field(
        default=None,
        description="Scheduling parameter overrides",
    )
    resolve_missing: bool = Field(
        default=False,
        description="Synthesize instants for items without one instead of hiding them",
    )


class VisibleRequest(ScheduleRequest):
    """Request schema for /schedule/visible."""

    probe_ms: float = Field(
        description="Probe time in ms since epoch",
    )
    force: bool = Field(
        default=False,
        description="Include every item started at or before probe_ms",
    )


# =============================================================================
# Schedule Responses
# =============================================================================


class ItemMetadataSchema(BaseModel):
    """Schedule outcome for one item."""

    index: int = Field(
        ge=0,
        description="Item index in the request",
    )
    visible: bool = Field(
        description="Whether the item is ever shown",
    )
    reason: Literal["unresolved", "empty_window", "capacity"] | None = Field(
        default=None,
        description="Why a hidden item is hidden",
    )
    time_ms: float | None = Field(
        default=None,
        description="Instant the item was scheduled at",
    )
    time_source: Literal["captured", "fallback", "interpolated"] | None = Field(
        default=None,
        description="Where time_ms came from",
    )
    start_ms: float | None = Field(
        default=None,
        description="Window start",
    )
    end_ms: float | None = Field(
        default=None,
        description="Window end",
    )
    slot_index: int = Field(
        ge=-1,
        description="Slot occupied, -1 when hidden",
    )
    max_concurrency: int = Field(
        ge=1,
        description="Peak concurrency during the item's window",
    )


class SegmentSchema(BaseModel):
    """Schema for a single composition segment."""

    start_ms: float = Field(
        description="Segment start",
    )
    end_ms: float = Field(
        description="Segment end",
    )
    layout_size: int = Field(
        ge=1,
        description="Number of composition columns",
        examples=[2],
    )
    slots: list[int | None] = Field(
        description="Item index per slot, null for an empty slot",
        examples=[[0, 1]],
    )


class ScheduleResponse(BaseModel):
    """Response schema for /schedule endpoint."""

    item_count: int = Field(
        ge=0,
        description="Number of items in the request",
    )
    visible_count: int = Field(
        ge=0,
        description="Number of items that are shown",
    )
    metadata: list[ItemMetadataSchema] = Field(
        description="Per-item outcome in request order",
    )
    segments: list[SegmentSchema] = Field(
        description="Composition segments in time order",
    )
    min_start_ms: float | None = Field(
        default=None,
        description="Earliest window start",
    )
    max_end_ms: float | None = Field(
        default=None,
        description="Latest window end",
    )
    config: dict[str, Any] = Field(
        description="Effective scheduling parameters after clamping",
    )


class VisibleEntrySchema(BaseModel):
    """An item on screen at the probe time."""

    item_index: int = Field(ge=0)
    slot_index: int = Field(ge=0)
    start_ms: float
    end_ms: float
    max_concurrency: int = Field(ge=1)


class VisibleResponse(BaseModel):
    """Response schema for /schedule/visible endpoint."""

    probe_ms: float = Field(
        description="Probe time in ms since epoch",
    )
    entries: list[VisibleEntrySchema] = Field(
        description="Items visible at probe_ms, ordered by slot",
    )
    segment: SegmentSchema | None = Field(
        default=None,
        description="Composition segment covering probe_ms",
    )


# =============================================================================
# Error Response
# =============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(
        description="Error code for programmatic handling",
        examples=["INVALID_INPUT", "INVALID_CONFIG"],
    )
    message: str = Field(
        description="Human-readable error message",
        examples=["items must not be empty"],
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error context",
    )


class ApiErrorResponse(BaseModel):
    """Standard error response wrapper."""

    error: ErrorDetail = Field(
        description="Error details",
    )
