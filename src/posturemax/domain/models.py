"""Core domain models for posturemax.

These models represent the state owned by the session orchestrator:
the monitoring session and its status samples, the state of each
optional surface, and the derived post-session report.
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Whether a monitoring session is in progress."""

    IDLE = "idle"
    RUNNING = "running"


class OpacityLevel(str, enum.Enum):
    """Opacity treatment of a surface window."""

    TRANSPARENT = "transparent"
    VISIBLE = "visible"

    def toggled(self) -> OpacityLevel:
        if self is OpacityLevel.TRANSPARENT:
            return OpacityLevel.VISIBLE
        return OpacityLevel.TRANSPARENT


class SurfaceName(str, enum.Enum):
    """Surfaces whose existence is managed by the orchestrator."""

    OVERLAY = "overlay"
    CAMERA = "camera"


class SurfaceLifecycle(str, enum.Enum):
    """Existence state of an optional surface."""

    ABSENT = "absent"
    VISIBLE = "visible"
    HIDDEN = "hidden"  # overlay only


class PostureDirection(str, enum.Enum):
    """Direction of a posture transition between adjacent samples."""

    GOOD_TO_BAD = "good-to-bad"
    BAD_TO_GOOD = "bad-to-good"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class Position(BaseModel):
    """Top-left corner of a window, in screen pixels."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int


class Bounds(BaseModel):
    """Position and size of a window or a work area."""

    model_config = ConfigDict(frozen=True)

    x: int = 0
    y: int = 0
    width: int = Field(gt=0)
    height: int = Field(gt=0)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class StatusSample(BaseModel):
    """A single posture classification.

    ``percentage_at_time`` is the good-sample ratio over every sample up
    to and including this one. It is filled in once when the sample is
    appended to a session and never recomputed.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    is_good: bool
    percentage_at_time: int | None = Field(default=None, ge=0, le=100)


class Session(BaseModel):
    """The authoritative monitoring session.

    Created once per process and reset on every start. Samples from the
    last completed session are kept for the report until the next start.
    """

    state: SessionState = Field(default=SessionState.IDLE)
    started_at: datetime | None = Field(default=None)
    samples: list[StatusSample] = Field(default_factory=list)
    frozen_elapsed: timedelta | None = Field(
        default=None, description="Elapsed time captured when the session stopped"
    )

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    @property
    def last_sample(self) -> StatusSample | None:
        return self.samples[-1] if self.samples else None


class SurfaceState(BaseModel):
    """Orchestrator-owned state of one optional surface."""

    name: SurfaceName
    lifecycle: SurfaceLifecycle = Field(default=SurfaceLifecycle.ABSENT)
    opacity: OpacityLevel = Field(default=OpacityLevel.VISIBLE)
    position: Position | None = Field(default=None)

    @property
    def exists(self) -> bool:
        return self.lifecycle is not SurfaceLifecycle.ABSENT

    @property
    def visible(self) -> bool:
        return self.lifecycle is SurfaceLifecycle.VISIBLE


class SessionReport(BaseModel):
    """Derived metrics for a session, computed on demand."""

    model_config = ConfigDict(frozen=True)

    elapsed: timedelta
    good_percentage: int = Field(ge=0, le=100)
    corrections: int = Field(ge=0)
    good_samples: int = Field(ge=0)
    total_samples: int = Field(ge=0)
    timeline: list[int] = Field(
        default_factory=list, description="Cached per-sample percentages, in order"
    )

    @property
    def elapsed_text(self) -> str:
        return format_clock(self.elapsed)


class SessionSnapshot(BaseModel):
    """Copy of the authoritative state handed to presenters."""

    model_config = ConfigDict(frozen=True)

    state: SessionState
    started_at: datetime | None
    samples: list[StatusSample]
    surfaces: dict[SurfaceName, SurfaceState]
    report: SessionReport | None = None


def format_clock(elapsed: timedelta) -> str:
    """Render an elapsed duration as ``MM:SS``."""
    total = max(0, int(elapsed.total_seconds()))
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"
