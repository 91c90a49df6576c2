"""Abstract base class for camera preview sources.

The camera presenter reads frames through this interface so that an
OpenCV webcam, a file-based source or a test double can be swapped in
without touching the presenter.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncIterator

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class PreviewFrame(BaseModel):
    """A single preview frame."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    image: np.ndarray = Field(description="Raw image data as BGR numpy array (OpenCV format)")
    timestamp: datetime = Field(default_factory=datetime.now)
    frame_number: int = Field(ge=0)
    source_device: str = Field(default="webcam")


class PreviewSource(ABC):
    """Abstract interface for a live camera preview.

    Example usage::

        async with WebcamPreview(device_index=0) as source:
            async for frame in source.stream(interval=0.1):
                show(frame)
    """

    def __init__(self) -> None:
        self._frame_counter: int = 0
        self._is_open: bool = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @abstractmethod
    async def open(self) -> None:
        """Acquire the camera device.

        Raises:
            CaptureError: If the device cannot be opened.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the camera device. Safe to call multiple times."""
        ...

    @abstractmethod
    async def read_frame(self) -> PreviewFrame:
        """Read one frame.

        Raises:
            CaptureError: If the read fails.
        """
        ...

    async def stream(self, interval: float = 0.1) -> AsyncIterator[PreviewFrame]:
        """Yield frames at roughly the requested interval until closed."""
        if not self._is_open:
            raise RuntimeError("Preview source is not open. Call open() first.")

        while self._is_open:
            frame = await self.read_frame()
            yield frame
            await asyncio.sleep(interval)

    async def __aenter__(self) -> PreviewSource:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()


class CaptureError(Exception):
    """Raised when the camera cannot be opened or read.

    ``reason`` is one of ``not_found``, ``busy``, ``read_failed`` or
    ``unknown`` and drives the status text shown by the camera surface.
    """

    def __init__(self, message: str, reason: str = "unknown") -> None:
        super().__init__(message)
        self.reason = reason
