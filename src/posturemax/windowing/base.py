"""Abstract base class for the platform windowing facility.

The surface registry drives windows exclusively through this interface,
so a real toolkit backend and the headless backend are interchangeable.
Windows are addressed by surface name; there is at most one window per
surface.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from posturemax.domain.models import Bounds, Position, SurfaceName

logger = logging.getLogger(__name__)


class WindowBackend(ABC):
    """Create, show, hide, close and place surface windows."""

    @abstractmethod
    def supports(self, surface: SurfaceName) -> bool:
        """Whether this platform can present the given surface kind."""
        ...

    @abstractmethod
    def create(self, surface: SurfaceName, bounds: Bounds) -> None:
        """Create the window for a surface at the given bounds (not yet shown).

        Raises:
            WindowBackendError: If the window cannot be created.
        """
        ...

    @abstractmethod
    def show(self, surface: SurfaceName) -> None: ...

    @abstractmethod
    def hide(self, surface: SurfaceName) -> None: ...

    @abstractmethod
    def close(self, surface: SurfaceName) -> None:
        """Destroy the window. Closing an absent window is not an error."""
        ...

    @abstractmethod
    def set_opacity(self, surface: SurfaceName, opacity: float) -> None: ...

    @abstractmethod
    def set_position(self, surface: SurfaceName, position: Position) -> None: ...

    @abstractmethod
    def get_bounds(self, surface: SurfaceName) -> Bounds: ...

    @abstractmethod
    def work_area(self) -> Bounds:
        """Usable area of the primary display."""
        ...


class WindowBackendError(Exception):
    """Raised when a window operation fails."""

    def __init__(self, message: str, surface: str = "") -> None:
        super().__init__(message)
        self.surface = surface
