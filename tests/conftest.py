"""!
@brief Shared fixtures for the LogiCam test-suite.
@details Puts ``src/`` on ``sys.path`` and provides an in-memory device
backend that records every call and mutates its own state the way a real
camera would, so resync behaviour can be observed.
"""
from __future__ import annotations

import pathlib
import sys
from dataclasses import replace

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from logicam.models import (  # noqa: E402
    CompositeResult,
    DeviceSettings,
    DeviceStatus,
    FormatChangeResult,
    VideoFormat,
)


class FakeBackend:
    """!
    @brief Recording stand-in for :class:`logicam.webcam.V4L2Webcam`.
    """

    def __init__(
        self,
        settings: DeviceSettings | None = None,
        video_format: VideoFormat | None = None,
        *,
        busy: bool = False,
    ) -> None:
        self.settings = settings or DeviceSettings()
        self.video_format = video_format or VideoFormat()
        self.status = DeviceStatus(available=True, in_use=busy)
        self.calls: list[tuple] = []
        self.reads = 0
        self.format_result: FormatChangeResult | None = None
        self.rate_result: FormatChangeResult | None = None
        self.optimal_result = CompositeResult(success=True)
        self.reset_result = CompositeResult(success=True)
        self.detailed_info = "Video Format:\nWidth/Height : 640/480"

    # Reads -----------------------------------------------------------------

    def get_current_settings(self) -> DeviceSettings:
        self.reads += 1
        return replace(self.settings)

    def get_current_video_format(self) -> VideoFormat:
        return replace(self.video_format)

    def get_device_status(self) -> DeviceStatus:
        return replace(self.status)

    def get_detailed_info(self) -> str:
        self.calls.append(("get_detailed_info",))
        return self.detailed_info

    # Scalar writes ---------------------------------------------------------

    def _set(self, name: str, value: object) -> bool:
        self.calls.append((f"set_{name}", value))
        setattr(self.settings, name, value)
        return True

    def set_brightness(self, value: int) -> bool:
        return self._set("brightness", value)

    def set_contrast(self, value: int) -> bool:
        return self._set("contrast", value)

    def set_saturation(self, value: int) -> bool:
        return self._set("saturation", value)

    def set_sharpness(self, value: int) -> bool:
        return self._set("sharpness", value)

    def set_gain(self, value: int) -> bool:
        return self._set("gain", value)

    def set_auto_exposure(self, enabled: bool) -> bool:
        return self._set("auto_exposure", enabled)

    def set_auto_focus(self, enabled: bool) -> bool:
        return self._set("auto_focus", enabled)

    def set_auto_white_balance(self, enabled: bool) -> bool:
        return self._set("auto_white_balance", enabled)

    def set_exposure_value(self, value: int) -> bool:
        return self._set("exposure_value", value)

    def set_focus_value(self, value: int) -> bool:
        return self._set("focus_value", value)

    def set_white_balance_value(self, value: int) -> bool:
        return self._set("white_balance_value", value)

    def set_power_line_frequency(self, frequency: int) -> bool:
        return self._set("power_line_frequency", frequency)

    # Exclusive-access writes -----------------------------------------------

    def set_video_format(self, width: int, height: int, pixel_format: str) -> FormatChangeResult:
        self.calls.append(("set_video_format", width, height, pixel_format))
        result = self.format_result or FormatChangeResult(success=True)
        if result.success:
            self.video_format = replace(
                self.video_format, width=width, height=height, pixel_format=pixel_format
            )
        return result

    def set_frame_rate(self, fps: int) -> FormatChangeResult:
        self.calls.append(("set_frame_rate", fps))
        result = self.rate_result or FormatChangeResult(success=True)
        if result.success:
            self.video_format = replace(self.video_format, frame_rate=float(fps))
        return result

    # Composite -------------------------------------------------------------

    def apply_optimal_settings(self) -> CompositeResult:
        self.calls.append(("apply_optimal_settings",))
        return self.optimal_result

    def reset_to_defaults(self) -> CompositeResult:
        self.calls.append(("reset_to_defaults",))
        return self.reset_result


class FakeClock:
    """!
    @brief Manually advanced monotonic clock (seconds).
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_backend_cls():
    return FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
