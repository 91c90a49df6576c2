"""Surface presenters for posturemax.

Public API:
    Presenter -- Abstract base class
    DashboardPresenter / OverlayPresenter / CameraPresenter
    PresenterHost -- Runs presenters as independent tasks
"""

from posturemax.presenters.base import Presenter
from posturemax.presenters.camera import CameraPresenter
from posturemax.presenters.dashboard import DashboardPresenter
from posturemax.presenters.host import PresenterHost
from posturemax.presenters.overlay import OverlayPresenter

__all__ = [
    "CameraPresenter",
    "DashboardPresenter",
    "OverlayPresenter",
    "Presenter",
    "PresenterHost",
]
