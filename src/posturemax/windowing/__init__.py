"""Windowing facility for posturemax.

Public API:
    WindowBackend -- Abstract base class
    WindowBackendError -- Raised by backends on failure
    HeadlessWindowBackend -- In-memory backend
"""

from posturemax.windowing.base import WindowBackend, WindowBackendError
from posturemax.windowing.headless import HeadlessWindowBackend

__all__ = ["HeadlessWindowBackend", "WindowBackend", "WindowBackendError"]
