"""Camera preview presenter.

Opens its preview source when the surface is attached and releases it
when the surface goes away. Camera failures stay local to this surface:
they change the status text and nothing else.
"""

from __future__ import annotations

import asyncio
import logging

from posturemax.bus.messages import Ack, HideCamera
from posturemax.capture.base import CaptureError, PreviewFrame, PreviewSource
from posturemax.presenters.base import Presenter

logger = logging.getLogger(__name__)

ERROR_TEXT = {
    "not_found": "No camera found. Please connect a camera and try again.",
    "busy": "Camera is being used by another application.",
    "read_failed": "Failed to load camera stream",
}


class CameraPresenter(Presenter):
    surface = "camera"
    shows_clock = False

    def __init__(
        self,
        *args,
        source: PreviewSource,
        frame_interval: float = 0.1,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        if source is None:
            raise ValueError("CameraPresenter needs a preview source")
        self._source = source
        self._frame_interval = frame_interval
        self._preview_task: asyncio.Task | None = None
        self.status_text = "Requesting camera access..."
        self.camera_active = False
        self.error: str | None = None
        self.last_frame: PreviewFrame | None = None

    async def run(self) -> None:
        self._preview_task = asyncio.get_running_loop().create_task(
            self._preview(), name="camera-preview"
        )
        try:
            await super().run()
        finally:
            self._preview_task.cancel()
            try:
                await self._preview_task
            except asyncio.CancelledError:
                pass
            await self._source.close()
            self.camera_active = False
            logger.info("Camera stopped")

    async def press_close(self) -> Ack:
        return await self._bus.invoke(HideCamera())

    async def _preview(self) -> None:
        try:
            await self._source.open()
            self.camera_active = True
            self.status_text = "Camera Active"
            async for frame in self._source.stream(interval=self._frame_interval):
                self.last_frame = frame
        except CaptureError as e:
            self._show_error(e)

    def _show_error(self, error: CaptureError) -> None:
        self.camera_active = False
        self.error = ERROR_TEXT.get(error.reason, f"Camera error: {error}")
        self.status_text = "Camera Error"
        logger.warning("Camera preview failed: %s", error)
