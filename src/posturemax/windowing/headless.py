"""In-memory window backend.

Keeps window geometry and flags in a dictionary instead of talking to a
display server. Used when no desktop toolkit is available and by the
test suite.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from posturemax.domain.models import Bounds, Position, SurfaceName
from posturemax.windowing.base import WindowBackend, WindowBackendError

logger = logging.getLogger(__name__)


@dataclass
class HeadlessWindow:
    bounds: Bounds
    shown: bool = False
    opacity: float = 1.0


class HeadlessWindowBackend(WindowBackend):
    """Window backend that records window state in memory."""

    def __init__(
        self,
        work_area: Bounds | None = None,
        unsupported: set[SurfaceName] | None = None,
    ) -> None:
        self._work_area = work_area or Bounds(width=1920, height=1080)
        self._unsupported = set(unsupported or ())
        self.windows: dict[SurfaceName, HeadlessWindow] = {}

    def supports(self, surface: SurfaceName) -> bool:
        return surface not in self._unsupported

    def create(self, surface: SurfaceName, bounds: Bounds) -> None:
        if not self.supports(surface):
            raise WindowBackendError(f"{surface.value} windows are not supported", surface.value)
        if surface in self.windows:
            raise WindowBackendError(f"{surface.value} window already exists", surface.value)
        self.windows[surface] = HeadlessWindow(bounds=bounds)
        logger.debug("Created %s window at %s", surface.value, bounds)

    def show(self, surface: SurfaceName) -> None:
        self._get(surface).shown = True

    def hide(self, surface: SurfaceName) -> None:
        self._get(surface).shown = False

    def close(self, surface: SurfaceName) -> None:
        if self.windows.pop(surface, None) is not None:
            logger.debug("Closed %s window", surface.value)

    def set_opacity(self, surface: SurfaceName, opacity: float) -> None:
        self._get(surface).opacity = opacity

    def set_position(self, surface: SurfaceName, position: Position) -> None:
        window = self._get(surface)
        window.bounds = window.bounds.model_copy(update={"x": position.x, "y": position.y})

    def get_bounds(self, surface: SurfaceName) -> Bounds:
        return self._get(surface).bounds

    def work_area(self) -> Bounds:
        return self._work_area

    def _get(self, surface: SurfaceName) -> HeadlessWindow:
        try:
            return self.windows[surface]
        except KeyError:
            raise WindowBackendError(f"No {surface.value} window", surface.value) from None
