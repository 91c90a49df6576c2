"""Message set carried by the command bus.

Commands flow from presenters and hotkeys to the orchestrator.
Notifications flow from the orchestrator to presenters. Both are
discriminated unions keyed on ``type``, which is the wire name of the
message; a command and a notification may share a wire name
(``start-monitoring``) because they travel on different channels.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from posturemax.domain.models import (
    OpacityLevel,
    Position,
    PostureDirection,
    SessionReport,
    SessionSnapshot,
    StatusSample,
    SurfaceName,
)


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Commands (presenter / hotkey -> orchestrator)
# ---------------------------------------------------------------------------


class StartMonitoring(_Message):
    type: Literal["start-monitoring"] = "start-monitoring"


class StopMonitoring(_Message):
    type: Literal["stop-monitoring"] = "stop-monitoring"


class ToggleMonitoring(_Message):
    type: Literal["toggle-monitoring"] = "toggle-monitoring"


class ToggleOverlay(_Message):
    type: Literal["toggle-overlay"] = "toggle-overlay"


class CenterOverlay(_Message):
    type: Literal["center-overlay"] = "center-overlay"


class CloseOverlay(_Message):
    """The overlay's own close button: ends the session and the overlay."""

    type: Literal["close-overlay"] = "close-overlay"


class SetTransparency(_Message):
    type: Literal["set-transparency"] = "set-transparency"
    level: OpacityLevel


class CycleTransparency(_Message):
    type: Literal["cycle-transparency"] = "cycle-transparency"


class ShowCamera(_Message):
    type: Literal["show-camera"] = "show-camera"


class HideCamera(_Message):
    type: Literal["hide-camera"] = "hide-camera"


class ToggleCamera(_Message):
    type: Literal["toggle-camera"] = "toggle-camera"


class RecordSample(_Message):
    type: Literal["record-sample"] = "record-sample"
    sample: StatusSample


class GetState(_Message):
    type: Literal["get-state"] = "get-state"


_COMMAND_TYPES = (
    StartMonitoring,
    StopMonitoring,
    ToggleMonitoring,
    ToggleOverlay,
    CenterOverlay,
    CloseOverlay,
    SetTransparency,
    CycleTransparency,
    ShowCamera,
    HideCamera,
    ToggleCamera,
    RecordSample,
    GetState,
)

Command = Annotated[Union[_COMMAND_TYPES], Field(discriminator="type")]


class Ack(BaseModel):
    """Reply to an invoked command.

    Every well-formed command is acknowledged with ``success=True``,
    including no-ops. ``success=False`` only comes from the boundary
    (malformed input) or from an unexpected handler failure.
    """

    model_config = ConfigDict(frozen=True)

    success: bool = True
    error: str | None = None
    snapshot: SessionSnapshot | None = None


# ---------------------------------------------------------------------------
# Notifications (orchestrator -> presenter)
# ---------------------------------------------------------------------------


class MonitoringStarted(_Message):
    type: Literal["start-monitoring"] = "start-monitoring"
    started_at: datetime


class MonitoringStopped(_Message):
    type: Literal["stop-monitoring"] = "stop-monitoring"
    report: SessionReport


class TransparencyChanged(_Message):
    type: Literal["transparency-changed"] = "transparency-changed"
    level: OpacityLevel


class OverlayClosed(_Message):
    type: Literal["overlay-closed"] = "overlay-closed"


class CameraClosed(_Message):
    type: Literal["camera-closed"] = "camera-closed"


class SampleRecorded(_Message):
    type: Literal["sample-recorded"] = "sample-recorded"
    sample: StatusSample


class PostureChanged(_Message):
    type: Literal["posture-changed"] = "posture-changed"
    direction: PostureDirection
    sample: StatusSample


class PositionChanged(_Message):
    type: Literal["position-changed"] = "position-changed"
    surface: SurfaceName
    position: Position


class VisibilityChanged(_Message):
    type: Literal["surface-visibility-changed"] = "surface-visibility-changed"
    surface: SurfaceName
    visible: bool


class StateSync(_Message):
    """Full state handed to a presenter when it is attached."""

    type: Literal["state-sync"] = "state-sync"
    snapshot: SessionSnapshot


Notification = Annotated[
    Union[
        MonitoringStarted,
        MonitoringStopped,
        TransparencyChanged,
        OverlayClosed,
        CameraClosed,
        SampleRecorded,
        PostureChanged,
        PositionChanged,
        VisibilityChanged,
        StateSync,
    ],
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


class MalformedCommand(ValueError):
    """Raised when raw input does not describe a valid command."""


def parse_command(raw: dict[str, Any] | str | bytes) -> Command:
    """Validate raw input (a dict or a JSON document) into a command.

    Raises:
        MalformedCommand: If the input names no known command or its
            payload is invalid (e.g. an unknown opacity level).
    """
    try:
        if isinstance(raw, (str, bytes)):
            return _command_adapter.validate_json(raw)
        return _command_adapter.validate_python(raw)
    except ValidationError as e:
        raise MalformedCommand(str(e)) from e


def command_names() -> list[str]:
    """Wire names of every command."""
    return [m.model_fields["type"].default for m in _COMMAND_TYPES]
