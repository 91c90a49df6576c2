"""posturemax -- multi-surface posture monitoring session shell.

A single session orchestrator owns the monitoring session and the state
of every optional surface (floating overlay, camera preview). Surfaces
are independent presenters that only ever see the session through
messages on the command bus.
"""

__version__ = "0.1.0"
