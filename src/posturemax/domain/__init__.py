"""Domain models for posturemax.

This package contains all core data structures, enumerations, and value
objects used throughout the system. All models use Pydantic v2 for
validation and serialization.
"""

from posturemax.domain.models import (
    Bounds,
    OpacityLevel,
    Position,
    PostureDirection,
    Session,
    SessionReport,
    SessionSnapshot,
    SessionState,
    StatusSample,
    SurfaceLifecycle,
    SurfaceName,
    SurfaceState,
)

__all__ = [
    "Bounds",
    "OpacityLevel",
    "Position",
    "PostureDirection",
    "Session",
    "SessionReport",
    "SessionSnapshot",
    "SessionState",
    "StatusSample",
    "SurfaceLifecycle",
    "SurfaceName",
    "SurfaceState",
]
