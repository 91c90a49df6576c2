"""Webcam preview source using OpenCV.

Runs OpenCV's blocking calls in the default thread pool executor so the
presenter's event loop keeps ticking.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

import cv2
import numpy as np

from posturemax.capture.base import CaptureError, PreviewFrame, PreviewSource

logger = logging.getLogger(__name__)


class WebcamPreview(PreviewSource):
    """Preview frames from a local webcam."""

    def __init__(
        self,
        device_index: int = 0,
        resolution: tuple[int, int] | None = (640, 480),
    ) -> None:
        super().__init__()
        self._device_index = device_index
        self._resolution = resolution
        self._cap: cv2.VideoCapture | None = None

    async def open(self) -> None:
        loop = asyncio.get_running_loop()
        self._cap = await loop.run_in_executor(None, cv2.VideoCapture, self._device_index)
        if not self._cap.isOpened():
            self._cap = None
            raise CaptureError(
                f"Failed to open webcam device {self._device_index}", reason="not_found"
            )
        if self._resolution:
            w, h = self._resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        # A device held by another process opens but never yields a frame.
        if not await loop.run_in_executor(None, self._cap.grab):
            self._cap.release()
            self._cap = None
            raise CaptureError(
                f"Webcam device {self._device_index} is not delivering frames", reason="busy"
            )
        self._is_open = True
        logger.info(
            "Opened webcam device %d (%dx%d)",
            self._device_index,
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    async def close(self) -> None:
        if self._cap is not None and self._cap.isOpened():
            self._cap.release()
            logger.info("Released webcam device %d", self._device_index)
        self._cap = None
        self._is_open = False

    async def read_frame(self) -> PreviewFrame:
        if not self._is_open or self._cap is None:
            raise CaptureError("Webcam is not open", reason="read_failed")
        loop = asyncio.get_running_loop()
        image = await loop.run_in_executor(None, self._read_sync)
        self._frame_counter += 1
        return PreviewFrame(
            image=image,
            timestamp=datetime.now(),
            frame_number=self._frame_counter,
            source_device=f"webcam:{self._device_index}",
        )

    def _read_sync(self) -> np.ndarray:
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise CaptureError("Failed to read frame from webcam", reason="read_failed")
        # Front camera preview is mirrored, like a selfie view.
        return cv2.flip(frame, 1)
