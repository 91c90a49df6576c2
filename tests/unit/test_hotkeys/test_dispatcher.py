"""Tests for hotkey normalization and dispatch."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from posturemax.bus.channel import CommandBus
from posturemax.bus.messages import CenterOverlay, ToggleMonitoring
from posturemax.config.settings import DEFAULT_HOTKEYS
from posturemax.hotkeys.dispatcher import (
    HotkeyDispatcher,
    HotkeyError,
    InProcessHotkeyBackend,
    normalize_chord,
)


class TestNormalizeChord:
    @pytest.mark.parametrize(
        "chord, expected",
        [
            ("CommandOrControl+Shift+M", "ctrl+shift+m"),
            ("Shift+CmdOrCtrl+p", "ctrl+shift+p"),
            ("alt + F4", "alt+f4"),
            ("x", "x"),
        ],
    )
    def test_normalize(self, chord: str, expected: str) -> None:
        assert normalize_chord(chord) == expected

    @pytest.mark.parametrize("chord", ["Ctrl+Shift", "Ctrl+A+B", ""])
    def test_needs_exactly_one_key(self, chord: str) -> None:
        with pytest.raises(HotkeyError):
            normalize_chord(chord)


class TestInProcessHotkeyBackend:
    def test_press_fires_callback(self) -> None:
        backend = InProcessHotkeyBackend()
        callback = MagicMock()
        backend.register("ctrl+shift+m", callback)
        assert backend.press("CommandOrControl+Shift+M") is True
        callback.assert_called_once_with()

    def test_press_unbound(self) -> None:
        backend = InProcessHotkeyBackend()
        assert backend.press("ctrl+shift+z") is False
        assert backend.press("ctrl+shift") is False

    def test_duplicate_registration(self) -> None:
        backend = InProcessHotkeyBackend()
        backend.register("ctrl+m", MagicMock())
        with pytest.raises(HotkeyError):
            backend.register("ctrl+m", MagicMock())


class TestHotkeyDispatcher:
    """Test binding chords to bus commands."""

    def test_register_defaults(self) -> None:
        backend = InProcessHotkeyBackend()
        dispatcher = HotkeyDispatcher(CommandBus(), backend, DEFAULT_HOTKEYS)
        dispatcher.register_all()
        assert dispatcher.registered == {
            "ctrl+shift+m": "toggle-monitoring",
            "ctrl+shift+p": "toggle-overlay",
            "ctrl+shift+t": "cycle-transparency",
            "ctrl+shift+c": "toggle-camera",
            "ctrl+shift+o": "center-overlay",
        }

    def test_register_all_is_idempotent(self) -> None:
        backend = InProcessHotkeyBackend()
        dispatcher = HotkeyDispatcher(CommandBus(), backend, DEFAULT_HOTKEYS)
        dispatcher.register_all()
        dispatcher.register_all()
        assert len(backend.chords) == len(DEFAULT_HOTKEYS)

    @pytest.mark.asyncio
    async def test_fire_enqueues_command(self) -> None:
        """A chord only enqueues; repeats enqueue again."""
        bus = CommandBus()
        backend = InProcessHotkeyBackend()
        HotkeyDispatcher(bus, backend, DEFAULT_HOTKEYS).register_all()

        backend.press("CommandOrControl+Shift+M")
        backend.press("CommandOrControl+Shift+O")
        backend.press("CommandOrControl+Shift+M")
        bus.close()

        commands = [command async for command, _ in bus.commands()]
        assert commands == [ToggleMonitoring(), CenterOverlay(), ToggleMonitoring()]

    def test_unknown_command_name(self) -> None:
        dispatcher = HotkeyDispatcher(
            CommandBus(), InProcessHotkeyBackend(), {"Ctrl+K": "launch-rockets"},
        )
        with pytest.raises(HotkeyError, match="launch-rockets"):
            dispatcher.register_all()

    def test_conflicting_chords(self) -> None:
        """Two spellings of the same chord collide after normalization."""
        dispatcher = HotkeyDispatcher(
            CommandBus(),
            InProcessHotkeyBackend(),
            {"Ctrl+Shift+M": "toggle-monitoring", "Shift+Control+m": "toggle-overlay"},
        )
        with pytest.raises(HotkeyError):
            dispatcher.register_all()

    def test_unregister_all(self) -> None:
        backend = InProcessHotkeyBackend()
        dispatcher = HotkeyDispatcher(CommandBus(), backend, DEFAULT_HOTKEYS)
        dispatcher.register_all()
        dispatcher.unregister_all()
        assert backend.chords == []
        assert dispatcher.registered == {}
