"""Main dashboard presenter.

Holds the start/stop control, the overlay and camera toggles and the
post-session report.
"""

from __future__ import annotations

import logging

from posturemax.bus.messages import (
    Ack,
    CameraClosed,
    MonitoringStarted,
    MonitoringStopped,
    OverlayClosed,
    StateSync,
    ToggleCamera,
    ToggleMonitoring,
    ToggleOverlay,
    VisibilityChanged,
)
from posturemax.domain.models import SessionReport, SurfaceName
from posturemax.presenters.base import Presenter

logger = logging.getLogger(__name__)

START_LABEL = "Start PostureMAX Monitoring"
STOP_LABEL = "Stop Monitoring"


class DashboardPresenter(Presenter):
    surface = "dashboard"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.button_label = START_LABEL
        self.report: SessionReport | None = None
        self.report_visible = False
        self.overlay_active = False
        self.camera_active = False

    @property
    def chart_points(self) -> list[int]:
        return list(self.report.timeline) if self.report else []

    # -- notifications ------------------------------------------------------------

    def on_state_sync(self, note: StateSync) -> None:
        super().on_state_sync(note)
        snapshot = note.snapshot
        self.overlay_active = snapshot.surfaces[SurfaceName.OVERLAY].visible
        self.camera_active = snapshot.surfaces[SurfaceName.CAMERA].visible
        self.report = snapshot.report
        self.report_visible = snapshot.report is not None and not self.monitoring
        self.button_label = STOP_LABEL if self.monitoring else START_LABEL

    def on_start_monitoring(self, note: MonitoringStarted) -> None:
        super().on_start_monitoring(note)
        self.button_label = STOP_LABEL
        self.report_visible = False

    def on_stop_monitoring(self, note: MonitoringStopped) -> None:
        super().on_stop_monitoring(note)
        self.button_label = START_LABEL
        self.report = note.report
        self.report_visible = True
        logger.info(
            "Report: %s, %d%% good, %d corrections",
            note.report.elapsed_text, note.report.good_percentage, note.report.corrections,
        )

    def on_overlay_closed(self, note: OverlayClosed) -> None:
        self.overlay_active = False

    def on_camera_closed(self, note: CameraClosed) -> None:
        self.camera_active = False

    def on_surface_visibility_changed(self, note: VisibilityChanged) -> None:
        if note.surface is SurfaceName.OVERLAY:
            self.overlay_active = note.visible
        elif note.surface is SurfaceName.CAMERA:
            self.camera_active = note.visible

    # -- controls -------------------------------------------------------------------

    async def press_monitoring_button(self) -> Ack:
        return await self._bus.invoke(ToggleMonitoring())

    async def press_overlay_toggle(self) -> Ack:
        return await self._bus.invoke(ToggleOverlay())

    async def press_camera_toggle(self) -> Ack:
        return await self._bus.invoke(ToggleCamera())
