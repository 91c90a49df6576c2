"""Tests for Channel and CommandBus."""

from __future__ import annotations

import asyncio

import pytest

from posturemax.bus.channel import Channel, ChannelClosed, CommandBus
from posturemax.bus.messages import (
    Ack,
    CenterOverlay,
    OverlayClosed,
    StartMonitoring,
    StopMonitoring,
)


class TestChannel:
    """Test ordering, close semantics and iteration."""

    @pytest.mark.asyncio
    async def test_delivers_in_send_order(self) -> None:
        channel: Channel[int] = Channel("numbers")
        for i in range(5):
            assert channel.send(i) is True
        assert [await channel.receive() for _ in range(5)] == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_send_after_close_is_dropped(self) -> None:
        channel: Channel[str] = Channel("c")
        channel.close()
        assert channel.send("late") is False
        with pytest.raises(ChannelClosed):
            await channel.receive()

    @pytest.mark.asyncio
    async def test_queued_messages_survive_close(self) -> None:
        """Messages sent before close() are still delivered."""
        channel: Channel[str] = Channel("c")
        channel.send("a")
        channel.send("b")
        channel.close()
        assert channel.pending() == 2
        assert [m async for m in channel] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_receive_after_drain_keeps_raising(self) -> None:
        channel: Channel[str] = Channel("c")
        channel.close()
        for _ in range(2):
            with pytest.raises(ChannelClosed):
                await channel.receive()

    @pytest.mark.asyncio
    async def test_close_wakes_waiting_receiver(self) -> None:
        channel: Channel[str] = Channel("c")
        waiter = asyncio.create_task(channel.receive())
        await asyncio.sleep(0)
        channel.close()
        with pytest.raises(ChannelClosed):
            await waiter

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        channel: Channel[str] = Channel("c")
        channel.close()
        channel.close()
        assert channel.is_closed
        assert channel.pending() == 0


class TestCommandBus:
    @pytest.mark.asyncio
    async def test_send_is_fire_and_forget(self) -> None:
        bus = CommandBus()
        assert bus.send(StartMonitoring()) is True
        bus.close()
        items = [item async for item in bus.commands()]
        assert items == [(StartMonitoring(), None)]

    @pytest.mark.asyncio
    async def test_invoke_waits_for_ack(self) -> None:
        bus = CommandBus()

        async def consumer() -> None:
            async for command, reply in bus.commands():
                reply.set_result(Ack(error=command.type))

        task = asyncio.create_task(consumer())
        ack = await bus.invoke(CenterOverlay())
        assert ack.success is True
        assert ack.error == "center-overlay"
        bus.close()
        await task

    @pytest.mark.asyncio
    async def test_invoke_on_closed_bus(self) -> None:
        bus = CommandBus()
        bus.close()
        ack = await bus.invoke(StopMonitoring())
        assert ack.success is False

    @pytest.mark.asyncio
    async def test_invoke_raw_rejects_malformed_input(self) -> None:
        """Malformed input is answered at the boundary and never enqueued."""
        bus = CommandBus()
        ack = await bus.invoke_raw({"type": "set-transparency", "level": "opaque"})
        assert ack.success is False
        ack = await bus.invoke_raw("not json")
        assert ack.success is False
        bus.close()
        assert [item async for item in bus.commands()] == []

    @pytest.mark.asyncio
    async def test_attach_replaces_previous_channel(self) -> None:
        bus = CommandBus()
        first = bus.attach("overlay")
        second = bus.attach("overlay")
        assert first.is_closed
        assert not second.is_closed
        assert bus.surfaces == ["overlay"]

    @pytest.mark.asyncio
    async def test_broadcast_reaches_attached_surfaces(self) -> None:
        bus = CommandBus()
        dashboard = bus.attach("dashboard")
        overlay = bus.attach("overlay")
        bus.detach("overlay")

        assert bus.broadcast(OverlayClosed()) == 1
        assert await dashboard.receive() == OverlayClosed()
        assert overlay.pending() == 0

    @pytest.mark.asyncio
    async def test_notify_unknown_surface(self) -> None:
        bus = CommandBus()
        assert bus.notify("camera", OverlayClosed()) is False
        assert bus.is_attached("camera") is False

    @pytest.mark.asyncio
    async def test_close_closes_every_channel(self) -> None:
        bus = CommandBus()
        channel = bus.attach("dashboard")
        bus.close()
        assert channel.is_closed
        assert bus.surfaces == []
        assert bus.send(StartMonitoring()) is False
