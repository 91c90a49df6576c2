"""Surface registry and per-surface lifecycle state machine.

Lifecycle per surface::

    ABSENT --show--> VISIBLE --stop (overlay)--> HIDDEN --grace expiry--> ABSENT
                        ^                          |
                        +-------- show/start ------+   (cancels the timer)

    VISIBLE/HIDDEN --close--> ABSENT              (immediate, cancels the timer)

The camera surface never enters HIDDEN: hiding it closes it. Opacity is
orthogonal to the lifecycle and survives HIDDEN <-> VISIBLE, but a
surface that goes ABSENT starts over with default state.

While HIDDEN after a stop the overlay window is left on screen so the
final numbers stay readable until the grace timer closes it.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Callable, Protocol

from posturemax.domain.models import (
    Bounds,
    OpacityLevel,
    Position,
    SurfaceLifecycle,
    SurfaceName,
    SurfaceState,
)
from posturemax.windowing.base import WindowBackend, WindowBackendError

logger = logging.getLogger(__name__)

DEFAULT_OPACITY_VALUES: dict[OpacityLevel, float] = {
    OpacityLevel.TRANSPARENT: 0.3,
    OpacityLevel.VISIBLE: 1.0,
}


def _centered(outer: int, inner: int) -> int:
    """Offset that centers ``inner`` in ``outer``, halves rounded up."""
    return math.floor((outer - inner) / 2 + 0.5)


class SurfaceListener(Protocol):
    """Receives existence changes, including those fired by timers."""

    def surface_created(self, surface: SurfaceName) -> None: ...

    def surface_destroyed(self, surface: SurfaceName) -> None: ...


class SurfaceRegistry:
    """Owns the :class:`SurfaceState` of every optional surface.

    All mutation goes through this class; callers get copies.
    """

    def __init__(
        self,
        backend: WindowBackend,
        sizes: dict[SurfaceName, tuple[int, int]] | None = None,
        hide_grace: float = 2.0,
        overlay_top_margin: int = 50,
        opacity_values: dict[OpacityLevel, float] | None = None,
        enabled: set[SurfaceName] | None = None,
    ) -> None:
        self._backend = backend
        self._sizes = sizes or {SurfaceName.OVERLAY: (800, 80), SurfaceName.CAMERA: (640, 480)}
        self._hide_grace = hide_grace
        self._overlay_top_margin = overlay_top_margin
        self._opacity_values = opacity_values or dict(DEFAULT_OPACITY_VALUES)
        self._enabled = set(SurfaceName) if enabled is None else set(enabled)
        self._states: dict[SurfaceName, SurfaceState] = {
            name: SurfaceState(name=name) for name in SurfaceName
        }
        self._timers: dict[SurfaceName, asyncio.TimerHandle] = {}
        self._listener: SurfaceListener | None = None

    def set_listener(self, listener: SurfaceListener) -> None:
        self._listener = listener

    # -- queries -------------------------------------------------------------

    def supports(self, surface: SurfaceName) -> bool:
        """Whether the surface applies to this platform and configuration."""
        return surface in self._enabled and self._backend.supports(surface)

    def state(self, surface: SurfaceName) -> SurfaceState:
        return self._states[surface].model_copy()

    def states(self) -> dict[SurfaceName, SurfaceState]:
        return {name: s.model_copy() for name, s in self._states.items()}

    def has_pending_close(self, surface: SurfaceName) -> bool:
        return surface in self._timers

    # -- transitions ---------------------------------------------------------

    def show(self, surface: SurfaceName) -> bool:
        """Make a surface visible, creating it if absent.

        Returns True if the lifecycle changed.
        """
        if not self.supports(surface):
            logger.debug("show(%s) ignored: surface not supported", surface.value)
            return False
        state = self._states[surface]
        if state.lifecycle is SurfaceLifecycle.VISIBLE:
            return False
        self._cancel_timer(surface)
        if state.lifecycle is SurfaceLifecycle.ABSENT:
            bounds = self._initial_bounds(surface)
            self._call(surface, "create", bounds)
            self._call(surface, "show")
            state.lifecycle = SurfaceLifecycle.VISIBLE
            state.position = Position(x=bounds.x, y=bounds.y)
            logger.info("Surface %s: absent -> visible", surface.value)
            if self._listener is not None:
                self._listener.surface_created(surface)
        else:
            self._call(surface, "show")
            state.lifecycle = SurfaceLifecycle.VISIBLE
            logger.info("Surface %s: hidden -> visible", surface.value)
        return True

    def hide(self, surface: SurfaceName) -> bool:
        """Hide a visible surface immediately.

        The overlay goes HIDDEN with no timer armed; the camera closes.
        """
        state = self._states[surface]
        if state.lifecycle is not SurfaceLifecycle.VISIBLE:
            return False
        if surface is not SurfaceName.OVERLAY:
            return self.close(surface)
        self._call(surface, "hide")
        state.lifecycle = SurfaceLifecycle.HIDDEN
        logger.info("Surface %s: visible -> hidden", surface.value)
        return True

    def hide_with_grace(self, surface: SurfaceName) -> bool:
        """Mark a visible overlay HIDDEN and arm its close timer."""
        state = self._states[surface]
        if surface is not SurfaceName.OVERLAY or state.lifecycle is not SurfaceLifecycle.VISIBLE:
            return False
        state.lifecycle = SurfaceLifecycle.HIDDEN
        loop = asyncio.get_running_loop()
        self._timers[surface] = loop.call_later(self._hide_grace, self._expire, surface)
        logger.info(
            "Surface %s: visible -> hidden, closing in %.1fs", surface.value, self._hide_grace,
        )
        return True

    def close(self, surface: SurfaceName) -> bool:
        """Destroy a surface immediately, cancelling any pending timer."""
        self._cancel_timer(surface)
        state = self._states[surface]
        if state.lifecycle is SurfaceLifecycle.ABSENT:
            return False
        self._call(surface, "close")
        self._states[surface] = SurfaceState(name=surface)
        logger.info("Surface %s: %s -> absent", surface.value, state.lifecycle.value)
        if self._listener is not None:
            self._listener.surface_destroyed(surface)
        return True

    def set_opacity(self, surface: SurfaceName, level: OpacityLevel) -> bool:
        """Apply an opacity level to an existing surface."""
        state = self._states[surface]
        if not state.exists:
            return False
        state.opacity = level
        self._call(surface, "set_opacity", self._opacity_values[level])
        return True

    def center(self, surface: SurfaceName) -> Position | None:
        """Center an existing surface in the work area."""
        state = self._states[surface]
        if not state.exists:
            return None
        area = self._backend.work_area()
        try:
            bounds = self._backend.get_bounds(surface)
        except WindowBackendError as e:
            logger.warning("Cannot read %s bounds: %s", surface.value, e)
            width, height = self._sizes[surface]
            bounds = Bounds(width=width, height=height)
        position = Position(
            x=area.x + _centered(area.width, bounds.width),
            y=area.y + _centered(area.height, bounds.height),
        )
        self._call(surface, "set_position", position)
        state.position = position
        return position

    def shutdown(self) -> None:
        """Cancel pending timers and close every surface."""
        for surface in SurfaceName:
            self.close(surface)

    # -- internals -----------------------------------------------------------

    def _initial_bounds(self, surface: SurfaceName) -> Bounds:
        area = self._backend.work_area()
        width, height = self._sizes[surface]
        x = area.x + _centered(area.width, width)
        if surface is SurfaceName.OVERLAY:
            y = area.y + self._overlay_top_margin
        else:
            y = area.y + _centered(area.height, height)
        return Bounds(x=x, y=y, width=width, height=height)

    def _expire(self, surface: SurfaceName) -> None:
        self._timers.pop(surface, None)
        if self._states[surface].lifecycle is SurfaceLifecycle.HIDDEN:
            logger.info("Grace period over for %s", surface.value)
            self.close(surface)

    def _cancel_timer(self, surface: SurfaceName) -> None:
        timer = self._timers.pop(surface, None)
        if timer is not None:
            timer.cancel()
            logger.debug("Cancelled pending close of %s", surface.value)

    def _call(self, surface: SurfaceName, op: str, *args: object) -> None:
        method: Callable[..., None] = getattr(self._backend, op)
        try:
            method(surface, *args)
        except WindowBackendError as e:
            logger.warning("Window %s(%s) failed: %s", op, surface.value, e)
