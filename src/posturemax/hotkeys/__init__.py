"""Global hotkey dispatch for posturemax.

Public API:
    HotkeyDispatcher -- Maps chords to bus commands
    HotkeyBackend -- Abstract registration facility
    InProcessHotkeyBackend -- Backend fired by explicit press() calls
"""

from posturemax.hotkeys.dispatcher import (
    HotkeyBackend,
    HotkeyDispatcher,
    HotkeyError,
    InProcessHotkeyBackend,
    normalize_chord,
)

__all__ = [
    "HotkeyBackend",
    "HotkeyDispatcher",
    "HotkeyError",
    "InProcessHotkeyBackend",
    "normalize_chord",
]
