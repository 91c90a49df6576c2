"""Abstract base class for surface presenters.

A presenter is the unprivileged side of a surface: it consumes its own
notification channel in send order, keeps a local (possibly stale) copy
of whatever it displays, and sends commands back over the bus. Each
presenter runs its own session clock; clocks on different surfaces share
the ``started_at`` epoch but are not synchronised with each other.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC
from datetime import datetime
from typing import Callable

from posturemax.bus.channel import Channel, CommandBus
from posturemax.bus.messages import (
    MonitoringStarted,
    MonitoringStopped,
    Notification,
    StateSync,
)
from posturemax.domain.models import SessionState, format_clock

logger = logging.getLogger(__name__)


class Presenter(ABC):
    """Base presenter: notification dispatch plus the local session clock.

    Notifications are dispatched to ``on_<type>`` methods, with dashes in
    the wire name replaced by underscores. Unknown notifications are
    ignored.
    """

    surface: str = ""
    shows_clock: bool = True

    def __init__(
        self,
        channel: Channel[Notification],
        bus: CommandBus,
        clock_interval: float = 1.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if channel is None or bus is None:
            raise ValueError(f"{type(self).__name__} needs a channel and a bus")
        if clock_interval <= 0:
            raise ValueError("clock_interval must be > 0")
        self._channel = channel
        self._bus = bus
        self._clock_interval = clock_interval
        self._clock = clock
        self._clock_task: asyncio.Task | None = None
        self.monitoring = False
        self.started_at: datetime | None = None
        self.timer_text = "00:00"

    async def run(self) -> None:
        """Consume notifications until the channel is closed."""
        logger.debug("%s presenter started", self.surface)
        try:
            async for notification in self._channel:
                self.handle(notification)
        finally:
            self._stop_clock()
            logger.debug("%s presenter finished", self.surface)

    def handle(self, notification: Notification) -> None:
        method = getattr(self, "on_" + notification.type.replace("-", "_"), None)
        if method is not None:
            method(notification)

    # -- notifications shared by every presenter --------------------------------

    def on_state_sync(self, note: StateSync) -> None:
        snapshot = note.snapshot
        if snapshot.state is SessionState.RUNNING and snapshot.started_at is not None:
            self._begin(snapshot.started_at)
        else:
            self._end()
            if snapshot.report is not None:
                self.timer_text = snapshot.report.elapsed_text

    def on_start_monitoring(self, note: MonitoringStarted) -> None:
        self._begin(note.started_at)

    def on_stop_monitoring(self, note: MonitoringStopped) -> None:
        self._end()
        self.timer_text = note.report.elapsed_text

    # -- local clock --------------------------------------------------------------

    def tick(self) -> None:
        if self.started_at is not None:
            self.timer_text = format_clock(self._clock() - self.started_at)

    def _begin(self, started_at: datetime) -> None:
        self.monitoring = True
        self.started_at = started_at
        self.tick()
        if self.shows_clock and self._clock_task is None:
            self._clock_task = asyncio.get_running_loop().create_task(
                self._run_clock(), name=f"{self.surface}-clock"
            )

    def _end(self) -> None:
        self.monitoring = False
        self._stop_clock()
        self.started_at = None

    async def _run_clock(self) -> None:
        while True:
            await asyncio.sleep(self._clock_interval)
            self.tick()

    def _stop_clock(self) -> None:
        if self._clock_task is not None:
            self._clock_task.cancel()
            self._clock_task = None
