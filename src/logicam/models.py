"""!
@brief Shared records exchanged between the backend and the control engine.
@details The backend owns the truth about the device; these dataclasses are
the snapshots it hands out. :class:`DeviceBackend` is the protocol every
backend implementation (the ``v4l2-ctl`` one in :mod:`logicam.webcam`, or a
test double) satisfies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, runtime_checkable

DEVICE_BUSY = "DEVICE_BUSY"
UNKNOWN = "UNKNOWN"


@dataclass
class DeviceSettings:
    """!
    @brief Picture controls and automatic modes as last read from the device.
    """

    brightness: int = 128
    contrast: int = 128
    saturation: int = 128
    sharpness: int = 128
    gain: int = 0
    auto_exposure: bool = False
    auto_focus: bool = False
    auto_white_balance: bool = True
    exposure_value: int = 250
    focus_value: int = 0
    white_balance_value: int = 4000
    power_line_frequency: int = 2


@dataclass
class VideoFormat:
    """!
    @brief Canonical record of the capture format.
    @details Both the resolution and the pixel format selects derive from this
    one record, and a change to either half reads the other half from here.
    """

    width: int = 640
    height: int = 480
    pixel_format: str = "YUYV"
    frame_rate: float = 30.0

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def frame_rate_label(self) -> str:
        rate = self.frame_rate
        if float(rate).is_integer():
            return f"{int(rate)}fps"
        return f"{rate:g}fps"


@dataclass
class DeviceStatus:
    available: bool
    in_use: bool
    error: str | None = None


@dataclass
class FormatChangeResult:
    """!
    @brief Result of an exclusive-access change (format or frame rate).
    @details ``error`` is :data:`DEVICE_BUSY` when another application holds
    the stream and :data:`UNKNOWN` for any other failure.
    """

    success: bool
    error: str | None = None

    @property
    def busy(self) -> bool:
        return self.error == DEVICE_BUSY


@dataclass
class CompositeResult:
    success: bool
    errors: List[str] = field(default_factory=list)


@runtime_checkable
class DeviceBackend(Protocol):
    """!
    @brief Interface through which all hardware state is read and mutated.
    @details Scalar setters return ``True`` on success; callers treat the value
    as informational and trust the following resync instead.
    """

    def get_current_settings(self) -> DeviceSettings: ...

    def get_current_video_format(self) -> VideoFormat: ...

    def get_device_status(self) -> DeviceStatus: ...

    def set_brightness(self, value: int) -> bool: ...

    def set_contrast(self, value: int) -> bool: ...

    def set_saturation(self, value: int) -> bool: ...

    def set_sharpness(self, value: int) -> bool: ...

    def set_gain(self, value: int) -> bool: ...

    def set_auto_exposure(self, enabled: bool) -> bool: ...

    def set_auto_focus(self, enabled: bool) -> bool: ...

    def set_auto_white_balance(self, enabled: bool) -> bool: ...

    def set_exposure_value(self, value: int) -> bool: ...

    def set_focus_value(self, value: int) -> bool: ...

    def set_white_balance_value(self, value: int) -> bool: ...

    def set_power_line_frequency(self, frequency: int) -> bool: ...

    def set_video_format(self, width: int, height: int, pixel_format: str) -> FormatChangeResult: ...

    def set_frame_rate(self, fps: int) -> FormatChangeResult: ...

    def apply_optimal_settings(self) -> CompositeResult: ...

    def reset_to_defaults(self) -> CompositeResult: ...

    def get_detailed_info(self) -> str: ...


__all__ = [
    "DEVICE_BUSY",
    "UNKNOWN",
    "CompositeResult",
    "DeviceBackend",
    "DeviceSettings",
    "DeviceStatus",
    "FormatChangeResult",
    "VideoFormat",
]
