"""Asynchronous message channels connecting the orchestrator and surfaces.

Each channel is an ordered, at-most-once, single-consumer queue. There is
one command channel into the orchestrator and one notification channel
per attached surface. Sending never blocks and never raises: a message
sent to a closed channel is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Generic, TypeVar

from posturemax.bus.messages import Ack, Command, MalformedCommand, Notification, parse_command

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised by :meth:`Channel.receive` once a closed channel is drained."""


class Channel(Generic[T]):
    """Ordered one-way message queue.

    Example usage::

        async for message in channel:
            handle(message)
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def send(self, message: T) -> bool:
        """Enqueue a message. Returns False if the channel is closed."""
        if self._closed:
            logger.debug("Dropped %r on closed channel %s", message, self.name)
            return False
        self._queue.put_nowait(message)
        return True

    async def receive(self) -> T:
        """Wait for the next message.

        Messages queued before :meth:`close` are still delivered.

        Raises:
            ChannelClosed: When the channel is closed and drained.
        """
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker for any later receive() call.
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(self.name)
        return item

    def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def pending(self) -> int:
        return self._queue.qsize() - (1 if self._closed else 0)

    async def __aiter__(self) -> AsyncIterator[T]:
        while True:
            try:
                yield await self.receive()
            except ChannelClosed:
                return


class CommandBus:
    """Message bus between the orchestrator and every surface.

    Commands go into a single channel consumed by the orchestrator, either
    fire-and-forget (:meth:`send`) or awaiting an :class:`Ack`
    (:meth:`invoke`). Notifications go out on per-surface channels created
    by :meth:`attach`.
    """

    def __init__(self) -> None:
        self._commands: Channel[tuple[Command, asyncio.Future | None]] = Channel("commands")
        self._surfaces: dict[str, Channel[Notification]] = {}

    # -- command direction -------------------------------------------------

    def send(self, command: Command) -> bool:
        """Fire-and-forget a command to the orchestrator."""
        return self._commands.send((command, None))

    async def invoke(self, command: Command) -> Ack:
        """Send a command and wait for the orchestrator's acknowledgment."""
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        if not self._commands.send((command, future)):
            return Ack(success=False, error="command bus is closed")
        return await future

    async def invoke_raw(self, raw: dict | str | bytes) -> Ack:
        """Validate untrusted input at the boundary, then invoke it.

        Malformed input is rejected here and never reaches the orchestrator.
        """
        try:
            command = parse_command(raw)
        except MalformedCommand as e:
            logger.warning("Rejected malformed command: %s", e)
            return Ack(success=False, error=str(e))
        return await self.invoke(command)

    async def commands(self) -> AsyncIterator[tuple[Command, asyncio.Future | None]]:
        async for item in self._commands:
            yield item

    # -- notification direction --------------------------------------------

    def attach(self, surface: str) -> Channel[Notification]:
        """Open a fresh notification channel for a surface.

        Any previous channel for the same surface is closed first.
        """
        self.detach(surface)
        channel: Channel[Notification] = Channel(surface)
        self._surfaces[surface] = channel
        logger.debug("Attached surface channel %s", surface)
        return channel

    def detach(self, surface: str) -> None:
        channel = self._surfaces.pop(surface, None)
        if channel is not None:
            channel.close()
            logger.debug("Detached surface channel %s", surface)

    def is_attached(self, surface: str) -> bool:
        channel = self._surfaces.get(surface)
        return channel is not None and not channel.is_closed

    @property
    def surfaces(self) -> list[str]:
        return list(self._surfaces)

    def notify(self, surface: str, notification: Notification) -> bool:
        """Deliver a notification to one surface, if it is reachable."""
        channel = self._surfaces.get(surface)
        if channel is None:
            logger.debug("No channel for %s, dropped %s", surface, notification.type)
            return False
        return channel.send(notification)

    def broadcast(self, notification: Notification) -> int:
        """Deliver a notification to every attached surface.

        Returns the number of surfaces it was queued for.
        """
        return sum(1 for name in list(self._surfaces) if self.notify(name, notification))

    def close(self) -> None:
        """Close every channel."""
        for name in list(self._surfaces):
            self.detach(name)
        self._commands.close()
