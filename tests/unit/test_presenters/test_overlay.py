"""Tests for the overlay presenter."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from conftest import make_sample

from posturemax.bus.channel import CommandBus
from posturemax.bus.messages import (
    Ack,
    CenterOverlay,
    CloseOverlay,
    MonitoringStopped,
    PostureChanged,
    SampleRecorded,
    StateSync,
    TransparencyChanged,
)
from posturemax.domain.models import (
    OpacityLevel,
    PostureDirection,
    SessionReport,
    SessionSnapshot,
    SessionState,
    SurfaceName,
    SurfaceState,
)
from posturemax.presenters.overlay import OverlayMode, OverlayPresenter


@pytest.fixture
def mock_bus() -> MagicMock:
    return MagicMock(spec=CommandBus)


@pytest.fixture
def overlay(mock_bus: MagicMock) -> OverlayPresenter:
    return OverlayPresenter(MagicMock(), mock_bus)


def _stamped(is_good: bool, percentage: int):
    return make_sample(is_good).model_copy(update={"percentage_at_time": percentage})


class TestOverlayPresenter:
    """Test status, percentage and lock handling."""

    def test_initial_display(self, overlay: OverlayPresenter) -> None:
        assert overlay.status_text == "Good"
        assert overlay.status_icon == "✓"
        assert overlay.percentage_text == "100%"
        assert overlay.locked is False

    def test_sample_updates_status(self, overlay: OverlayPresenter) -> None:
        overlay.handle(SampleRecorded(sample=_stamped(False, 67)))
        assert overlay.status_text == "Bad"
        assert overlay.status_icon == "✗"
        assert overlay.percentage_text == "67%"

    def test_bad_posture_centers_and_locks(
        self, overlay: OverlayPresenter, mock_bus: MagicMock,
    ) -> None:
        """A good-to-bad transition asks the orchestrator to center the overlay."""
        sample = _stamped(False, 50)
        overlay.handle(PostureChanged(direction=PostureDirection.GOOD_TO_BAD, sample=sample))
        assert overlay.locked is True
        mock_bus.send.assert_called_once_with(CenterOverlay())

    def test_good_posture_unlocks(self, overlay: OverlayPresenter, mock_bus: MagicMock) -> None:
        overlay.locked = True
        sample = _stamped(True, 50)
        overlay.handle(PostureChanged(direction=PostureDirection.BAD_TO_GOOD, sample=sample))
        assert overlay.locked is False
        mock_bus.send.assert_not_called()

    def test_transparency_changed(self, overlay: OverlayPresenter) -> None:
        overlay.handle(TransparencyChanged(level=OpacityLevel.TRANSPARENT))
        assert overlay.opacity is OpacityLevel.TRANSPARENT

    def test_state_sync_restores_display(self, overlay: OverlayPresenter) -> None:
        surfaces = {name: SurfaceState(name=name) for name in SurfaceName}
        surfaces[SurfaceName.OVERLAY] = SurfaceState(
            name=SurfaceName.OVERLAY, opacity=OpacityLevel.TRANSPARENT,
        )
        snapshot = SessionSnapshot(
            state=SessionState.IDLE,
            started_at=None,
            samples=[_stamped(True, 100), _stamped(False, 50)],
            surfaces=surfaces,
        )
        overlay.handle(StateSync(snapshot=snapshot))
        assert overlay.opacity is OpacityLevel.TRANSPARENT
        assert overlay.status_text == "Bad"
        assert overlay.percentage_text == "50%"
        assert overlay.timer_text == "00:00"

    @pytest.mark.asyncio
    async def test_press_transparency_goes_through_boundary(
        self, overlay: OverlayPresenter, mock_bus: MagicMock,
    ) -> None:
        mock_bus.invoke_raw.return_value = Ack(success=False, error="bad level")
        ack = await overlay.press_transparency("opaque")
        assert ack.success is False
        mock_bus.invoke_raw.assert_awaited_once_with({"type": "set-transparency", "level": "opaque"})

    @pytest.mark.asyncio
    async def test_press_close(self, overlay: OverlayPresenter, mock_bus: MagicMock) -> None:
        mock_bus.invoke.return_value = Ack()
        await overlay.press_close()
        mock_bus.invoke.assert_awaited_once_with(CloseOverlay())

    def test_elapsed_text_after_stop(self, overlay: OverlayPresenter) -> None:
        report = SessionReport(
            elapsed=timedelta(minutes=2, seconds=5),
            good_percentage=100, corrections=0, good_samples=0, total_samples=0,
        )
        overlay.handle(MonitoringStopped(report=report))
        assert overlay.timer_text == "02:05"

    def test_select_mode_stays_local(self, overlay: OverlayPresenter, mock_bus: MagicMock) -> None:
        assert overlay.mode is OverlayMode.STATUS
        assert overlay.select_mode("percentage") is OverlayMode.PERCENTAGE
        assert overlay.select_mode(OverlayMode.CAMERA) is OverlayMode.CAMERA
        with pytest.raises(ValueError):
            overlay.select_mode("chart")
        assert overlay.mode is OverlayMode.CAMERA
        mock_bus.send.assert_not_called()
        mock_bus.invoke.assert_not_called()
