"""!
@brief ``v4l2-ctl`` implementation of the device backend.
@details :class:`V4L2Webcam` reads and writes UVC controls and the capture
format by invoking ``v4l2-ctl`` through :mod:`logicam.command_runner`. Driver
failures never raise: reads fall back to the defaults in
:mod:`logicam.constants`, scalar writes return ``False``, and exclusive-access
writes return a :class:`~logicam.models.FormatChangeResult` carrying
``DEVICE_BUSY`` or ``UNKNOWN``. The composite profiles run their whole step
sequence and collect every failure instead of stopping at the first one.
"""
from __future__ import annotations

import os
import re
import shutil
from typing import Callable, List

from . import command_runner, constants
from .models import (
    DEVICE_BUSY,
    UNKNOWN,
    CompositeResult,
    DeviceSettings,
    DeviceStatus,
    FormatChangeResult,
    VideoFormat,
)

_WIDTH_HEIGHT_RE = re.compile(r"Width/Height\s*:\s*(\d+)/(\d+)")
_PIXEL_FORMAT_RE = re.compile(r"Pixel Format\s*:\s*'([^']+)'")
_FRAME_RATE_RE = re.compile(r"Frames per second:\s*([0-9.]+)")

DETAILED_INFO_UNAVAILABLE = "Unable to retrieve detailed information"


def _clamp(value: int, key: str) -> int:
    low, high = constants.CONTROL_LIMITS[key]
    return max(low, min(high, int(value)))


def parse_control_value(output: str) -> int | None:
    """!
    @brief Extract the integer from ``--get-ctrl`` output such as ``gain: 12``.
    @returns Parsed value or ``None`` when the output is not recognised.
    """

    text = output.strip()
    for separator in (":", "="):
        if separator in text:
            candidate = text.rsplit(separator, 1)[-1].strip()
            try:
                return int(candidate)
            except ValueError:
                return None
    return None


def parse_video_format(fmt_output: str, parm_output: str) -> VideoFormat:
    """!
    @brief Build a :class:`VideoFormat` from ``--get-fmt-video`` and ``--get-parm`` output.
    @details Missing fields fall back to :data:`constants.FALLBACK_FORMAT`
    individually.
    """

    width, height, pixel_format, frame_rate = constants.FALLBACK_FORMAT
    size_match = _WIDTH_HEIGHT_RE.search(fmt_output)
    if size_match:
        width, height = int(size_match.group(1)), int(size_match.group(2))
    format_match = _PIXEL_FORMAT_RE.search(fmt_output)
    if format_match:
        pixel_format = format_match.group(1)
    rate_match = _FRAME_RATE_RE.search(parm_output)
    if rate_match:
        try:
            frame_rate = float(rate_match.group(1))
        except ValueError:
            pass
    return VideoFormat(width=width, height=height, pixel_format=pixel_format, frame_rate=frame_rate)


class V4L2Webcam:
    """!
    @brief Device backend driving a UVC camera through ``v4l2-ctl``.
    """

    def __init__(
        self,
        device: str = constants.DEFAULT_DEVICE,
        *,
        timeout: float | None = command_runner.DEFAULT_TIMEOUT,
    ) -> None:
        self.device = device
        self.timeout = timeout

    # -----------------------------------------------------------------------
    # Bootstrap checks
    # -----------------------------------------------------------------------

    def check_device(self) -> bool:
        return os.path.exists(self.device)

    def check_dependencies(self) -> List[str]:
        """!
        @brief Report the system packages needed to drive the device.
        @returns Package names that are missing (empty when ready).
        """

        missing: List[str] = []
        if shutil.which(constants.V4L2_CTL) is None:
            missing.append(constants.V4L2_PACKAGE)
        return missing

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def _run(self, *arguments: str, event: str, **extra: object) -> command_runner.CommandResult:
        command = [constants.V4L2_CTL, "-d", self.device, *arguments]
        payload = {"device": self.device}
        payload.update(extra)
        return command_runner.run_command(command, event=event, timeout=self.timeout, extra=payload)

    def get_control(self, control: str) -> int | None:
        result = self._run(f"--get-ctrl={control}", event="v4l2_get_ctrl", control=control)
        if not result.ok:
            return None
        return parse_control_value(result.stdout)

    def _read(self, key: str) -> int:
        value = self.get_control(constants.V4L2_CONTROLS[key])
        if value is None:
            return constants.FALLBACK_CONTROL_VALUES[key]
        return value

    def _read_flag(self, key: str, enabled_value: int) -> bool:
        return self.get_control(constants.V4L2_CONTROLS[key]) == enabled_value

    def get_current_settings(self) -> DeviceSettings:
        return DeviceSettings(
            brightness=self._read(constants.BRIGHTNESS),
            contrast=self._read(constants.CONTRAST),
            saturation=self._read(constants.SATURATION),
            sharpness=self._read(constants.SHARPNESS),
            gain=self._read(constants.GAIN),
            auto_exposure=self._read_flag(constants.AUTO_EXPOSURE, constants.AUTO_EXPOSURE_ON),
            auto_focus=self._read_flag(constants.AUTO_FOCUS, 1),
            auto_white_balance=self._read_flag(constants.AUTO_WHITE_BALANCE, 1),
            exposure_value=self._read(constants.EXPOSURE_VALUE),
            focus_value=self._read(constants.FOCUS_VALUE),
            white_balance_value=self._read(constants.WHITE_BALANCE_VALUE),
            power_line_frequency=self._read(constants.POWER_LINE_FREQUENCY),
        )

    def get_current_video_format(self) -> VideoFormat:
        fmt = self._run("--get-fmt-video", event="v4l2_get_fmt")
        if not fmt.ok:
            return parse_video_format("", "")
        parm = self._run("--get-parm", event="v4l2_get_parm")
        return parse_video_format(fmt.stdout, parm.stdout if parm.ok else "")

    def get_device_status(self) -> DeviceStatus:
        """!
        @brief Probe the device with a harmless format query.
        @details A busy device is still available; a missing node or any
        other failure marks it unavailable.
        """

        result = self._run("--get-fmt-video", event="v4l2_status")
        if result.ok:
            return DeviceStatus(available=True, in_use=False)
        if result.busy:
            return DeviceStatus(available=True, in_use=True)
        if result.device_missing:
            return DeviceStatus(available=False, in_use=False, error="Device not found")
        return DeviceStatus(available=False, in_use=False, error="Unknown error")

    def get_detailed_info(self) -> str:
        fmt = self._run("--get-fmt-video", event="v4l2_info_fmt")
        parm = self._run("--get-parm", event="v4l2_info_parm")
        controls = self._run("--list-ctrls", event="v4l2_info_ctrls")
        if not (fmt.ok and parm.ok and controls.ok):
            return DETAILED_INFO_UNAVAILABLE
        return (
            f"Video Format:\n{fmt.stdout}\n"
            f"Frame Rate:\n{parm.stdout}\n"
            f"All Controls:\n{controls.stdout}"
        )

    # -----------------------------------------------------------------------
    # Scalar writes
    # -----------------------------------------------------------------------

    def set_control(self, control: str, value: int) -> bool:
        result = self._run(
            f"--set-ctrl={control}={value}",
            event="v4l2_set_ctrl",
            control=control,
            value=value,
        )
        return result.ok

    def _set(self, key: str, value: int) -> bool:
        return self.set_control(constants.V4L2_CONTROLS[key], _clamp(value, key))

    def set_brightness(self, value: int) -> bool:
        return self._set(constants.BRIGHTNESS, value)

    def set_contrast(self, value: int) -> bool:
        return self._set(constants.CONTRAST, value)

    def set_saturation(self, value: int) -> bool:
        return self._set(constants.SATURATION, value)

    def set_sharpness(self, value: int) -> bool:
        return self._set(constants.SHARPNESS, value)

    def set_gain(self, value: int) -> bool:
        return self._set(constants.GAIN, value)

    def set_auto_exposure(self, enabled: bool) -> bool:
        mode = constants.AUTO_EXPOSURE_ON if enabled else constants.AUTO_EXPOSURE_OFF
        return self.set_control(constants.V4L2_CONTROLS[constants.AUTO_EXPOSURE], mode)

    def set_auto_focus(self, enabled: bool) -> bool:
        return self.set_control(constants.V4L2_CONTROLS[constants.AUTO_FOCUS], 1 if enabled else 0)

    def set_auto_white_balance(self, enabled: bool) -> bool:
        return self.set_control(
            constants.V4L2_CONTROLS[constants.AUTO_WHITE_BALANCE], 1 if enabled else 0
        )

    def set_power_line_frequency(self, frequency: int) -> bool:
        return self._set(constants.POWER_LINE_FREQUENCY, frequency)

    def set_exposure_value(self, value: int) -> bool:
        return self._set(constants.EXPOSURE_VALUE, value)

    def set_focus_value(self, value: int) -> bool:
        return self._set(constants.FOCUS_VALUE, value)

    def set_white_balance_value(self, value: int) -> bool:
        return self._set(constants.WHITE_BALANCE_VALUE, value)

    # -----------------------------------------------------------------------
    # Exclusive-access writes
    # -----------------------------------------------------------------------

    @staticmethod
    def _format_change(result: command_runner.CommandResult) -> FormatChangeResult:
        if result.ok:
            return FormatChangeResult(success=True)
        if result.busy:
            return FormatChangeResult(success=False, error=DEVICE_BUSY)
        return FormatChangeResult(success=False, error=UNKNOWN)

    def set_video_format(self, width: int, height: int, pixel_format: str) -> FormatChangeResult:
        result = self._run(
            f"--set-fmt-video=width={width},height={height},pixelformat={pixel_format}",
            event="v4l2_set_fmt",
            width=width,
            height=height,
            pixel_format=pixel_format,
        )
        return self._format_change(result)

    def set_frame_rate(self, fps: int) -> FormatChangeResult:
        result = self._run(f"--set-parm={fps}", event="v4l2_set_parm", fps=fps)
        return self._format_change(result)

    # -----------------------------------------------------------------------
    # Composite profiles
    # -----------------------------------------------------------------------

    def _run_profile(
        self,
        verb: str,
        fmt: tuple[int, int, str],
        fps: int,
        controls: List[Callable[[], bool]],
    ) -> CompositeResult:
        errors: List[str] = []

        format_result = self.set_video_format(*fmt)
        if not format_result.success:
            if format_result.busy:
                errors.append(
                    f"Cannot {verb} video format: camera is in use by another application"
                )
            else:
                errors.append(f"Failed to {_failure_verb(verb)} video format")

        rate_result = self.set_frame_rate(fps)
        if not rate_result.success:
            if rate_result.busy:
                errors.append(f"Cannot {verb} frame rate: camera is in use by another application")
            else:
                errors.append(f"Failed to {_failure_verb(verb)} frame rate")

        # Picture controls usually still succeed while the stream is held elsewhere.
        for apply_control in controls:
            apply_control()

        return CompositeResult(success=not errors, errors=errors)

    def apply_optimal_settings(self) -> CompositeResult:
        return self._run_profile(
            "change",
            constants.OPTIMAL_FORMAT,
            constants.OPTIMAL_FRAME_RATE,
            [
                lambda: self.set_auto_exposure(True),
                lambda: self.set_auto_focus(True),
                lambda: self.set_auto_white_balance(True),
                lambda: self.set_power_line_frequency(2),
                lambda: self.set_saturation(128),
                lambda: self.set_sharpness(128),
                lambda: self.set_brightness(128),
                lambda: self.set_contrast(128),
            ],
        )

    def reset_to_defaults(self) -> CompositeResult:
        return self._run_profile(
            "reset",
            constants.DEFAULT_FORMAT,
            constants.DEFAULT_FRAME_RATE,
            [
                lambda: self.set_brightness(128),
                lambda: self.set_contrast(128),
                lambda: self.set_saturation(128),
                lambda: self.set_sharpness(128),
                lambda: self.set_gain(0),
                lambda: self.set_auto_exposure(False),
                lambda: self.set_auto_focus(False),
                lambda: self.set_auto_white_balance(True),
                lambda: self.set_power_line_frequency(1),
                lambda: self.set_control(constants.BACKLIGHT_COMPENSATION_CONTROL, 0),
            ],
        )


def _failure_verb(verb: str) -> str:
    return "set" if verb == "change" else verb


__all__ = ["DETAILED_INFO_UNAVAILABLE", "V4L2Webcam", "parse_control_value", "parse_video_format"]
