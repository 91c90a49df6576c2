"""The session orchestrator: single source of truth for the session.

Owns the :class:`Session` and, through the surface registry, every
:class:`SurfaceState`. Commands arrive on the command bus and are handled
synchronously against in-memory state; every effect on other surfaces
leaves as a fire-and-forget notification. Presenters only ever hold
copies of this state.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Protocol

from posturemax.bus.channel import Channel, CommandBus
from posturemax.bus.messages import (
    Ack,
    CameraClosed,
    Command,
    MonitoringStarted,
    MonitoringStopped,
    Notification,
    OverlayClosed,
    PositionChanged,
    PostureChanged,
    SampleRecorded,
    StateSync,
    TransparencyChanged,
    VisibilityChanged,
)
from posturemax.domain.models import (
    OpacityLevel,
    PostureDirection,
    Session,
    SessionReport,
    SessionSnapshot,
    SessionState,
    StatusSample,
    SurfaceName,
)
from posturemax.producer.base import SampleProducer
from posturemax.session.stats import build_report, stamp_sample
from posturemax.surfaces.registry import SurfaceRegistry

logger = logging.getLogger(__name__)


class SurfaceHost(Protocol):
    """Starts and stops the presenter behind an optional surface."""

    def spawn(self, surface: str, channel: Channel[Notification]) -> None: ...

    def dispose(self, surface: str) -> None: ...


class SessionOrchestrator:
    """Privileged controller for the monitoring session and its surfaces.

    Every public command is idempotent and returns normally when it has
    nothing to do; none of them raise under normal operation.
    """

    def __init__(
        self,
        bus: CommandBus,
        registry: SurfaceRegistry,
        producer: SampleProducer,
        host: SurfaceHost | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._bus = bus
        self._registry = registry
        self._producer = producer
        self._host = host
        self._clock = clock
        self._session = Session()
        self._last_report: SessionReport | None = None
        self._running = False
        self._registry.set_listener(self)
        self._handlers: dict[str, Callable[[Command], object]] = {
            "start-monitoring": lambda c: self.start_session(),
            "stop-monitoring": lambda c: self.stop_session(),
            "toggle-monitoring": lambda c: self.toggle_session(),
            "toggle-overlay": lambda c: self.toggle_surface(SurfaceName.OVERLAY),
            "center-overlay": lambda c: self.center_surface(SurfaceName.OVERLAY),
            "close-overlay": lambda c: self.close_overlay(),
            "set-transparency": lambda c: self.set_surface_opacity(SurfaceName.OVERLAY, c.level),
            "cycle-transparency": lambda c: self.cycle_surface_opacity(SurfaceName.OVERLAY),
            "show-camera": lambda c: self.show_surface(SurfaceName.CAMERA),
            "hide-camera": lambda c: self.hide_surface(SurfaceName.CAMERA),
            "toggle-camera": lambda c: self.toggle_surface(SurfaceName.CAMERA),
            "record-sample": lambda c: self.record_sample(c.sample),
            "get-state": lambda c: None,
        }

    # -- state access ----------------------------------------------------------

    @property
    def is_running(self) -> bool:
        """Whether the command loop is consuming the bus."""
        return self._running

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def samples(self) -> list[StatusSample]:
        return list(self._session.samples)

    @property
    def last_report(self) -> SessionReport | None:
        """Report of the last completed session, until the next start."""
        return self._last_report

    def report(self) -> SessionReport:
        """Report for the current session, or the frozen one after a stop."""
        return build_report(self._session, self._clock())

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._session.state,
            started_at=self._session.started_at,
            samples=list(self._session.samples),
            surfaces=self._registry.states(),
            report=self._last_report,
        )

    # -- session commands --------------------------------------------------------

    def start_session(self) -> bool:
        """Begin a new session, discarding the previous session's samples."""
        if self._session.is_running:
            logger.debug("start ignored: session already running")
            return False
        now = self._clock()
        self._session.state = SessionState.RUNNING
        self._session.started_at = now
        self._session.samples = []
        self._session.frozen_elapsed = None
        self._last_report = None
        logger.info("Session started at %s", now.strftime("%H:%M:%S"))

        self._show(SurfaceName.OVERLAY)
        self._bus.broadcast(MonitoringStarted(started_at=now))
        self._producer.begin(self.record_sample)
        return True

    def stop_session(self) -> bool:
        """End the running session and publish its report.

        The overlay lingers for the grace period before it closes.
        """
        if not self._session.is_running:
            logger.debug("stop ignored: no session running")
            return False
        self._producer.stop()
        now = self._clock()
        started_at = self._session.started_at or now
        self._session.frozen_elapsed = now - started_at
        self._session.state = SessionState.IDLE
        self._session.started_at = None

        report = build_report(self._session, now)
        self._last_report = report
        logger.info(
            "Session stopped after %s: %d samples, %d%% good, %d corrections",
            report.elapsed_text, report.total_samples, report.good_percentage, report.corrections,
        )
        self._bus.broadcast(MonitoringStopped(report=report))
        # The overlay stays on screen until the grace timer closes it;
        # overlay-closed resets the dashboard toggle then.
        self._registry.hide_with_grace(SurfaceName.OVERLAY)
        return True

    def toggle_session(self) -> bool:
        if self._session.is_running:
            return self.stop_session()
        return self.start_session()

    def record_sample(self, sample: StatusSample) -> bool:
        """Append a sample to the running session.

        Samples arriving while idle are dropped: the producer may not have
        observed the stop yet.
        """
        if not self._session.is_running:
            logger.debug("Dropped sample from %s: session idle", sample.timestamp)
            return False
        previous = self._session.last_sample
        stamped = stamp_sample(sample, self._session.samples)
        self._session.samples.append(stamped)
        self._bus.broadcast(SampleRecorded(sample=stamped))

        direction = None
        if previous is None:
            if not stamped.is_good:
                direction = PostureDirection.GOOD_TO_BAD
        elif previous.is_good != stamped.is_good:
            direction = (
                PostureDirection.BAD_TO_GOOD if stamped.is_good else PostureDirection.GOOD_TO_BAD
            )
        if direction is not None:
            logger.info("Posture changed: %s", direction.value)
            self._bus.broadcast(PostureChanged(direction=direction, sample=stamped))
        return True

    # -- surface commands --------------------------------------------------------

    def toggle_surface(self, surface: SurfaceName) -> bool:
        if self._registry.state(surface).visible:
            return self.close_surface(surface)
        return self.show_surface(surface)

    def show_surface(self, surface: SurfaceName) -> bool:
        return self._show(surface)

    def hide_surface(self, surface: SurfaceName) -> bool:
        was_visible = self._registry.state(surface).visible
        if not self._registry.hide(surface):
            return False
        # Closing the camera already announced itself.
        if was_visible and self._registry.state(surface).exists:
            self._bus.broadcast(VisibilityChanged(surface=surface, visible=False))
        return True

    def close_surface(self, surface: SurfaceName) -> bool:
        return self._registry.close(surface)

    def close_overlay(self) -> bool:
        """Stop the session and close the overlay without a grace period."""
        self.stop_session()
        return self.close_surface(SurfaceName.OVERLAY)

    def set_surface_opacity(self, surface: SurfaceName, level: OpacityLevel | str) -> bool:
        try:
            level = OpacityLevel(level)
        except ValueError:
            logger.warning("Rejected opacity level %r for %s", level, surface.value)
            return False
        if not self._registry.set_opacity(surface, level):
            logger.debug("set_opacity(%s) ignored: surface absent", surface.value)
            return False
        logger.info("Surface %s opacity -> %s", surface.value, level.value)
        self._bus.broadcast(TransparencyChanged(level=level))
        return True

    def cycle_surface_opacity(self, surface: SurfaceName) -> bool:
        state = self._registry.state(surface)
        if not state.exists:
            return False
        return self.set_surface_opacity(surface, state.opacity.toggled())

    def center_surface(self, surface: SurfaceName) -> bool:
        position = self._registry.center(surface)
        if position is None:
            return False
        self._bus.broadcast(PositionChanged(surface=surface, position=position))
        return True

    # -- presenters --------------------------------------------------------------

    def attach(self, surface: str) -> Channel[Notification]:
        """Open a notification channel and seed it with the current state."""
        channel = self._bus.attach(surface)
        channel.send(StateSync(snapshot=self.snapshot()))
        return channel

    def surface_created(self, surface: SurfaceName) -> None:
        channel = self.attach(surface.value)
        if self._host is not None:
            self._host.spawn(surface.value, channel)

    def surface_destroyed(self, surface: SurfaceName) -> None:
        self._bus.detach(surface.value)
        if self._host is not None:
            self._host.dispose(surface.value)
        closed = OverlayClosed() if surface is SurfaceName.OVERLAY else CameraClosed()
        self._bus.broadcast(closed)
        self._bus.broadcast(VisibilityChanged(surface=surface, visible=False))

    # -- command loop ------------------------------------------------------------

    def handle(self, command: Command) -> Ack:
        """Apply one command and acknowledge it."""
        handler = self._handlers.get(command.type)
        if handler is None:
            logger.warning("No handler for command %s", command.type)
            return Ack(success=False, error=f"unknown command {command.type}")
        try:
            handler(command)
        except Exception as e:
            logger.error("Command %s failed: %s", command.type, e)
            return Ack(success=False, error=str(e))
        if command.type == "get-state":
            return Ack(snapshot=self.snapshot())
        return Ack()

    async def run(self) -> None:
        """Consume the command bus until it is closed or the task is cancelled."""
        self._running = True
        logger.info("Orchestrator command loop started")
        try:
            async for command, reply in self._bus.commands():
                logger.debug("Command: %s", command.type)
                ack = self.handle(command)
                if reply is not None and not reply.done():
                    reply.set_result(ack)
        finally:
            self._running = False
            logger.info("Orchestrator command loop finished")

    def shutdown(self) -> None:
        """Stop producing, close every surface and the bus."""
        self._producer.stop()
        self._registry.shutdown()
        self._bus.close()

    def _show(self, surface: SurfaceName) -> bool:
        if not self._registry.show(surface):
            return False
        self._bus.broadcast(VisibilityChanged(surface=surface, visible=True))
        return True
