"""Session orchestration for posturemax.

Public API:
    SessionOrchestrator -- Owns session and surface state
    good_percentage / correction_count / elapsed_duration / build_report
"""

from posturemax.session.orchestrator import SessionOrchestrator, SurfaceHost
from posturemax.session.stats import (
    build_report,
    correction_count,
    elapsed_duration,
    good_percentage,
)

__all__ = [
    "SessionOrchestrator",
    "SurfaceHost",
    "build_report",
    "correction_count",
    "elapsed_duration",
    "good_percentage",
]
