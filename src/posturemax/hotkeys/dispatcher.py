"""Global hotkey dispatcher.

Maps system-wide key chords to orchestrator commands. Registration
happens once at startup; a chord firing only enqueues its command on the
bus and returns, so rapid repeats fall back on the commands' own
idempotence.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from posturemax.bus.channel import CommandBus
from posturemax.bus.messages import Command, MalformedCommand, parse_command

logger = logging.getLogger(__name__)

MODIFIER_ALIASES = {
    "commandorcontrol": "ctrl",
    "cmdorctrl": "ctrl",
    "control": "ctrl",
    "ctrl": "ctrl",
    "command": "ctrl",
    "cmd": "ctrl",
    "shift": "shift",
    "alt": "alt",
    "option": "alt",
    "super": "super",
    "meta": "super",
}
MODIFIER_ORDER = ["ctrl", "alt", "shift", "super"]


def normalize_chord(chord: str) -> str:
    """Canonical form of a chord: ``ctrl+shift+m``.

    Modifiers are sorted and aliased (``CommandOrControl`` -> ``ctrl``).

    Raises:
        HotkeyError: If the chord has no key or more than one non-modifier key.
    """
    parts = [p.strip().lower() for p in chord.split("+") if p.strip()]
    modifiers = {MODIFIER_ALIASES[p] for p in parts if p in MODIFIER_ALIASES}
    keys = [p for p in parts if p not in MODIFIER_ALIASES]
    if len(keys) != 1:
        raise HotkeyError(f"Chord {chord!r} must name exactly one key")
    ordered = [m for m in MODIFIER_ORDER if m in modifiers]
    return "+".join(ordered + keys)


class HotkeyBackend(ABC):
    """Platform facility for system-wide key chords."""

    @abstractmethod
    def register(self, chord: str, callback: Callable[[], None]) -> None:
        """Bind ``callback`` to a normalized chord.

        Raises:
            HotkeyError: If the chord is already taken.
        """
        ...

    @abstractmethod
    def unregister_all(self) -> None: ...


class InProcessHotkeyBackend(HotkeyBackend):
    """Hotkey backend driven by explicit :meth:`press` calls.

    Used by the local endpoint's ``/hotkey`` route, so an external key
    daemon can forward chords, and by tests.
    """

    def __init__(self) -> None:
        self._bindings: dict[str, Callable[[], None]] = {}

    @property
    def chords(self) -> list[str]:
        return list(self._bindings)

    def register(self, chord: str, callback: Callable[[], None]) -> None:
        if chord in self._bindings:
            raise HotkeyError(f"Chord {chord!r} is already registered")
        self._bindings[chord] = callback

    def unregister_all(self) -> None:
        self._bindings.clear()

    def press(self, chord: str) -> bool:
        """Fire a chord. Returns False if nothing is bound to it."""
        try:
            key = normalize_chord(chord)
        except HotkeyError:
            return False
        callback = self._bindings.get(key)
        if callback is None:
            logger.debug("Unbound chord %s", chord)
            return False
        callback()
        return True


class HotkeyDispatcher:
    """Binds configured chords to commands on the bus."""

    def __init__(
        self,
        bus: CommandBus,
        backend: HotkeyBackend,
        bindings: dict[str, str],
    ) -> None:
        self._bus = bus
        self._backend = backend
        self._bindings = dict(bindings)
        self._registered: dict[str, Command] = {}

    @property
    def registered(self) -> dict[str, str]:
        return {chord: command.type for chord, command in self._registered.items()}

    def register_all(self) -> None:
        """Register every binding with the backend.

        Raises:
            HotkeyError: On an unknown command name, a malformed chord or
                two bindings for the same chord.
        """
        if self._registered:
            return
        for chord, name in self._bindings.items():
            try:
                command = parse_command({"type": name})
            except MalformedCommand as e:
                raise HotkeyError(f"Hotkey {chord!r} names unknown command {name!r}") from e
            key = normalize_chord(chord)
            self._backend.register(key, lambda c=command: self._fire(c))
            self._registered[key] = command
            logger.info("Registered hotkey %s -> %s", key, name)

    def unregister_all(self) -> None:
        self._backend.unregister_all()
        self._registered.clear()

    def _fire(self, command: Command) -> None:
        logger.debug("Hotkey fired: %s", command.type)
        self._bus.send(command)


class HotkeyError(Exception):
    """Raised for invalid or conflicting hotkey registrations."""
