"""Command bus for posturemax.

Asynchronous message passing between the session orchestrator and the
independent surfaces (dashboard, overlay, camera preview).

Public API:
    CommandBus -- Command channel plus per-surface notification channels
    Channel -- Ordered at-most-once queue
    parse_command -- Boundary validation of raw command input
"""

from posturemax.bus.channel import Channel, ChannelClosed, CommandBus
from posturemax.bus.messages import Ack, MalformedCommand, parse_command

__all__ = [
    "Ack",
    "Channel",
    "ChannelClosed",
    "CommandBus",
    "MalformedCommand",
    "parse_command",
]
