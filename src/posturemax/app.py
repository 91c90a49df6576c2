"""Process wiring for the posturemax session shell.

Builds the bus, orchestrator, surface registry, presenters and hotkeys
from settings and runs them on one event loop until cancelled.
"""

from __future__ import annotations

import asyncio
import logging

from posturemax.bus.channel import Channel, CommandBus
from posturemax.bus.messages import Notification
from posturemax.capture.base import PreviewSource
from posturemax.config.settings import Settings
from posturemax.domain.models import Bounds, OpacityLevel, SurfaceName
from posturemax.hotkeys.dispatcher import HotkeyDispatcher, InProcessHotkeyBackend
from posturemax.presenters.camera import CameraPresenter
from posturemax.presenters.dashboard import DashboardPresenter
from posturemax.presenters.host import PresenterHost
from posturemax.presenters.overlay import OverlayPresenter
from posturemax.producer.base import SampleProducer
from posturemax.producer.simulated import RandomSampleProducer
from posturemax.session.orchestrator import SessionOrchestrator
from posturemax.surfaces.registry import SurfaceRegistry
from posturemax.windowing.base import WindowBackend
from posturemax.windowing.headless import HeadlessWindowBackend

logger = logging.getLogger(__name__)


class PostureApp:
    """All long-lived components of one posturemax process."""

    def __init__(
        self,
        settings: Settings,
        window_backend: WindowBackend | None = None,
        producer: SampleProducer | None = None,
        preview_source: PreviewSource | None = None,
    ) -> None:
        self.settings = settings
        self._preview_source = preview_source

        display = settings.display
        self.windows = window_backend or HeadlessWindowBackend(
            work_area=Bounds(width=display.work_area_width, height=display.work_area_height),
        )
        p = settings.producer
        self.producer = producer or RandomSampleProducer(
            min_interval=p.min_interval,
            max_interval=p.max_interval,
            good_probability=p.good_probability,
            seed=p.seed,
        )

        self.bus = CommandBus()
        enabled = set(SurfaceName)
        if not settings.camera.enabled:
            enabled.discard(SurfaceName.CAMERA)
        self.registry = SurfaceRegistry(
            self.windows,
            sizes={
                SurfaceName.OVERLAY: (settings.overlay.width, settings.overlay.height),
                SurfaceName.CAMERA: (settings.camera.width, settings.camera.height),
            },
            hide_grace=settings.session.hide_grace_ms / 1000.0,
            overlay_top_margin=settings.overlay.top_margin,
            opacity_values={
                OpacityLevel.TRANSPARENT: settings.overlay.transparent_opacity,
                OpacityLevel.VISIBLE: settings.overlay.visible_opacity,
            },
            enabled=enabled,
        )
        self.host = PresenterHost(
            self.bus,
            {
                "dashboard": self._make_dashboard,
                SurfaceName.OVERLAY.value: self._make_overlay,
                SurfaceName.CAMERA.value: self._make_camera,
            },
        )
        self.orchestrator = SessionOrchestrator(
            self.bus, self.registry, self.producer, host=self.host,
        )
        self.hotkey_backend = InProcessHotkeyBackend()
        self.hotkeys = HotkeyDispatcher(self.bus, self.hotkey_backend, settings.hotkeys)

    @property
    def dashboard(self) -> DashboardPresenter | None:
        presenter = self.host.get("dashboard")
        return presenter if isinstance(presenter, DashboardPresenter) else None

    async def run(self, serve_endpoint: bool = True) -> None:
        """Run until cancelled."""
        self.hotkeys.register_all()
        self.host.spawn("dashboard", self.orchestrator.attach("dashboard"))
        tasks = [asyncio.create_task(self.orchestrator.run(), name="orchestrator")]
        if serve_endpoint:
            tasks.append(asyncio.create_task(self._serve_endpoint(), name="endpoint"))
        logger.info("posturemax running")
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self.shutdown()

    async def shutdown(self) -> None:
        self.hotkeys.unregister_all()
        self.orchestrator.shutdown()
        await self.host.shutdown()
        logger.info("posturemax stopped")

    async def _serve_endpoint(self) -> None:
        import uvicorn

        from posturemax.endpoint.server import create_app

        ep = self.settings.endpoint
        app = create_app(self.bus, self.orchestrator, hotkeys=self.hotkey_backend)
        server = uvicorn.Server(uvicorn.Config(app, host=ep.host, port=ep.port, log_config=None))
        await server.serve()

    # -- presenter factories ---------------------------------------------------

    def _make_dashboard(self, channel: Channel[Notification]) -> DashboardPresenter:
        return DashboardPresenter(
            channel, self.bus, clock_interval=self.settings.session.clock_interval,
        )

    def _make_overlay(self, channel: Channel[Notification]) -> OverlayPresenter:
        return OverlayPresenter(
            channel, self.bus, clock_interval=self.settings.session.clock_interval,
        )

    def _make_camera(self, channel: Channel[Notification]) -> CameraPresenter:
        source = self._preview_source
        if source is None:
            from posturemax.capture.webcam import WebcamPreview

            cam = self.settings.camera
            source = WebcamPreview(device_index=cam.device_index, resolution=(cam.width, cam.height))
        return CameraPresenter(
            channel,
            self.bus,
            source=source,
            frame_interval=self.settings.camera.frame_interval,
        )
