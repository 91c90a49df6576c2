"""Floating always-on-top overlay presenter.

Shows the session clock, the latest posture status and the running good
percentage. On a good-to-bad transition it locks itself and asks the
orchestrator to center the overlay; a bad-to-good transition unlocks it.
"""

from __future__ import annotations

import enum
import logging

from posturemax.bus.messages import (
    Ack,
    CenterOverlay,
    CloseOverlay,
    PostureChanged,
    SampleRecorded,
    StateSync,
    TransparencyChanged,
)
from posturemax.domain.models import OpacityLevel, PostureDirection, StatusSample, SurfaceName
from posturemax.presenters.base import Presenter

logger = logging.getLogger(__name__)


class OverlayMode(str, enum.Enum):
    """What the overlay puts front and centre."""

    STATUS = "status"
    PERCENTAGE = "percentage"
    CAMERA = "camera"


class OverlayPresenter(Presenter):
    surface = "overlay"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.status_text = "Good"
        self.status_icon = "✓"
        self.percentage_text = "100%"
        self.locked = False
        self.opacity = OpacityLevel.VISIBLE
        self.mode = OverlayMode.STATUS

    def on_state_sync(self, note: StateSync) -> None:
        super().on_state_sync(note)
        snapshot = note.snapshot
        self.opacity = snapshot.surfaces[SurfaceName.OVERLAY].opacity
        if snapshot.samples:
            self._show_sample(snapshot.samples[-1])

    def on_sample_recorded(self, note: SampleRecorded) -> None:
        self._show_sample(note.sample)

    def on_posture_changed(self, note: PostureChanged) -> None:
        if note.direction is PostureDirection.GOOD_TO_BAD:
            self.locked = True
            self._bus.send(CenterOverlay())
            logger.info("Bad posture: overlay centered and locked")
        else:
            self.locked = False
            logger.info("Good posture restored: overlay unlocked")

    def on_transparency_changed(self, note: TransparencyChanged) -> None:
        self.opacity = note.level

    def select_mode(self, mode: OverlayMode | str) -> OverlayMode:
        """Switch the display mode. Local to this overlay."""
        self.mode = OverlayMode(mode)
        logger.info("Overlay display mode: %s", self.mode.value)
        return self.mode

    async def press_transparency(self, level: OpacityLevel | str) -> Ack:
        return await self._bus.invoke_raw({"type": "set-transparency", "level": level})

    async def press_close(self) -> Ack:
        return await self._bus.invoke(CloseOverlay())

    def _show_sample(self, sample: StatusSample) -> None:
        if sample.is_good:
            self.status_text, self.status_icon = "Good", "✓"
        else:
            self.status_text, self.status_icon = "Bad", "✗"
        if sample.percentage_at_time is not None:
            self.percentage_text = f"{sample.percentage_at_time}%"
