"""Camera preview capture for posturemax.

Public API:
    PreviewSource -- Abstract base class
    CaptureError -- Raised when the camera cannot be used
    WebcamPreview -- OpenCV webcam implementation
"""

from posturemax.capture.base import CaptureError, PreviewFrame, PreviewSource

__all__ = ["CaptureError", "PreviewFrame", "PreviewSource", "WebcamPreview"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "WebcamPreview":
        from posturemax.capture.webcam import WebcamPreview
        return WebcamPreview
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
