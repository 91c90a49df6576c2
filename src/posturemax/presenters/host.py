"""Runs presenters as independent asyncio tasks.

The orchestrator asks the host to spawn a presenter when a surface comes
into existence and to dispose of it when the surface goes away. A
presenter that crashes takes only its own surface channel down.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from posturemax.bus.channel import Channel, CommandBus
from posturemax.bus.messages import Notification
from posturemax.presenters.base import Presenter

logger = logging.getLogger(__name__)

PresenterFactory = Callable[[Channel[Notification]], Presenter]


class PresenterHost:
    """Creates, tracks and retires presenter tasks."""

    def __init__(self, bus: CommandBus, factories: dict[str, PresenterFactory]) -> None:
        self._bus = bus
        self._factories = factories
        self._presenters: dict[str, Presenter] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._retiring: set[asyncio.Task] = set()

    @property
    def presenters(self) -> dict[str, Presenter]:
        return dict(self._presenters)

    def get(self, surface: str) -> Presenter | None:
        return self._presenters.get(surface)

    def spawn(self, surface: str, channel: Channel[Notification]) -> None:
        factory = self._factories.get(surface)
        if factory is None:
            logger.debug("No presenter registered for %s", surface)
            return
        self.dispose(surface)
        presenter = factory(channel)
        task = asyncio.get_running_loop().create_task(presenter.run(), name=f"{surface}-presenter")
        task.add_done_callback(lambda t, s=surface, c=channel: self._finished(s, c, t))
        self._presenters[surface] = presenter
        self._tasks[surface] = task
        logger.info("Spawned %s presenter", surface)

    def dispose(self, surface: str) -> None:
        """Forget a presenter. Its task ends once its closed channel drains."""
        self._presenters.pop(surface, None)
        task = self._tasks.pop(surface, None)
        if task is not None and not task.done():
            self._retiring.add(task)

    async def shutdown(self) -> None:
        """Cancel every presenter task and wait for them to finish."""
        tasks = list(self._tasks.values()) + list(self._retiring)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._presenters.clear()
        self._tasks.clear()
        self._retiring.clear()

    def _finished(self, surface: str, channel: Channel[Notification], task: asyncio.Task) -> None:
        self._retiring.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        logger.error("%s presenter crashed: %s", surface, error)
        channel.close()
        if self._tasks.get(surface) is task:
            self._tasks.pop(surface, None)
            self._presenters.pop(surface, None)
