"""!
@brief Apply pipeline between the control engine and the device backend.
@details Every mutation goes through :class:`ApplyPipeline`. It dispatches the
new value to the matching backend call, translates exclusive-access failures
into user feedback, and always finishes with a full resync of the settings,
the canonical video format and the device status, read as one unit. The
backend is the only source of truth; nothing here patches local state
incrementally.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

from . import constants as c
from . import logging_ext
from .catalog import SettingValue, power_line_value
from .dialogs import DialogMachine
from .models import (
    CompositeResult,
    DeviceBackend,
    DeviceSettings,
    DeviceStatus,
    FormatChangeResult,
    VideoFormat,
)
from .notifications import NotificationService, Severity

BUSY_MESSAGES: Dict[str, str] = {
    c.RESOLUTION: "Cannot change resolution: camera is in use",
    c.PIXEL_FORMAT: "Cannot change pixel format: camera is in use",
    c.FRAME_RATE: "Cannot change frame rate: camera is in use",
}

SCALAR_KEYS = frozenset(
    {
        c.BRIGHTNESS,
        c.CONTRAST,
        c.SATURATION,
        c.SHARPNESS,
        c.GAIN,
        c.AUTO_EXPOSURE,
        c.EXPOSURE_VALUE,
        c.AUTO_FOCUS,
        c.FOCUS_VALUE,
        c.AUTO_WHITE_BALANCE,
        c.WHITE_BALANCE_VALUE,
    }
)


@dataclass
class DeviceState:
    """!
    @brief Last resynchronised view of the device.
    """

    settings: DeviceSettings
    video_format: VideoFormat
    status: DeviceStatus

    @property
    def device_busy(self) -> bool:
        return self.status.in_use


@dataclass
class ApplyOutcome:
    key: str
    value: SettingValue
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class _CompositeMessages:
    event: str
    started: str
    succeeded: str
    partial_title: str
    failed: str


OPTIMIZE_MESSAGES = _CompositeMessages(
    event="optimize",
    started="Applying optimal settings...",
    succeeded="Optimal settings applied successfully!",
    partial_title="Optimal Settings - Partial Success",
    failed="Failed to apply optimal settings",
)
RESET_MESSAGES = _CompositeMessages(
    event="reset",
    started="Resetting to factory defaults...",
    succeeded="Factory defaults restored successfully!",
    partial_title="Reset to Defaults - Partial Success",
    failed="Failed to reset to defaults",
)


def parse_resolution(label: str) -> tuple[int, int]:
    width, _, height = label.partition("x")
    return int(width), int(height)


def parse_frame_rate(label: str) -> int:
    return int(float(label.replace("fps", "")))


def join_errors(errors: list[str]) -> str:
    return ". ".join(errors) + "."


class ApplyPipeline:
    """!
    @brief Orchestrates backend calls, feedback, and the resync that follows.
    """

    def __init__(
        self,
        backend: DeviceBackend,
        notifications: NotificationService,
        dialogs: DialogMachine,
    ) -> None:
        self.backend = backend
        self.notifications = notifications
        self.dialogs = dialogs
        self.human_logger = logging_ext.get_human_logger()
        self.machine_logger = logging_ext.get_machine_logger()
        self.state = self._read_state()

    def _read_state(self) -> DeviceState:
        return DeviceState(
            settings=self.backend.get_current_settings(),
            video_format=self.backend.get_current_video_format(),
            status=self.backend.get_device_status(),
        )

    def refresh(self) -> DeviceState:
        """!
        @brief Re-read settings, format and status from the backend as one unit.
        """

        self.state = self._read_state()
        return self.state

    # -----------------------------------------------------------------------
    # Single settings
    # -----------------------------------------------------------------------

    def apply(self, key: str, value: SettingValue) -> ApplyOutcome:
        """!
        @brief Push ``value`` for ``key`` to the device and resync.
        @details Scalar setter return values are logged only; exclusive-access
        results surface a notification when the device is busy and stay silent
        for any other failure.
        """

        self.machine_logger.info(
            "apply_setting",
            extra={"event": "apply_setting", "key": key, "value": value},
        )
        try:
            if key in BUSY_MESSAGES:
                outcome = self._apply_format(key, str(value))
            elif key == c.POWER_LINE_FREQUENCY:
                accepted = self.backend.set_power_line_frequency(power_line_value(str(value)))
                outcome = ApplyOutcome(key, value, success=bool(accepted))
            elif key in SCALAR_KEYS:
                setter: Callable[[object], bool] = getattr(self.backend, f"set_{key}")
                accepted = setter(value)
                outcome = ApplyOutcome(key, value, success=bool(accepted))
            else:
                raise KeyError(f"Unknown setting: {key}")
        finally:
            self.refresh()

        if not outcome.success:
            self.human_logger.warning(
                "Setting %s to %s was not accepted (%s)", key, value, outcome.error or "rejected"
            )
        return outcome

    def _apply_format(self, key: str, value: str) -> ApplyOutcome:
        current = self.state.video_format
        result: FormatChangeResult
        if key == c.RESOLUTION:
            width, height = parse_resolution(value)
            result = self.backend.set_video_format(width, height, current.pixel_format)
        elif key == c.PIXEL_FORMAT:
            result = self.backend.set_video_format(current.width, current.height, value)
        else:
            result = self.backend.set_frame_rate(parse_frame_rate(value))

        if result.busy:
            self.notifications.notify(BUSY_MESSAGES[key], Severity.ERROR)
        return ApplyOutcome(key, value, success=result.success, error=result.error)

    # -----------------------------------------------------------------------
    # Composite operations
    # -----------------------------------------------------------------------

    def optimize(self) -> CompositeResult:
        return self._run_composite(self.backend.apply_optimal_settings, OPTIMIZE_MESSAGES)

    def reset_to_defaults(self) -> CompositeResult:
        return self._run_composite(self.backend.reset_to_defaults, RESET_MESSAGES)

    def _run_composite(
        self, operation: Callable[[], CompositeResult], messages: _CompositeMessages
    ) -> CompositeResult:
        self.notifications.notify(messages.started, Severity.INFO)
        self.human_logger.info(messages.started)
        try:
            result = operation()
        finally:
            self.refresh()

        self.machine_logger.info(
            f"{messages.event}_result",
            extra={
                "event": f"{messages.event}_result",
                "success": result.success,
                "errors": list(result.errors),
            },
        )

        if result.success:
            self.notifications.notify(messages.succeeded, Severity.SUCCESS)
            self.human_logger.info(messages.succeeded)
        elif result.errors:
            self.dialogs.open_error(messages.partial_title, join_errors(result.errors))
            self.human_logger.warning("%s: %s", messages.partial_title, "; ".join(result.errors))
        else:
            self.notifications.notify(messages.failed, Severity.ERROR)
            self.human_logger.error(messages.failed)
        return result


__all__ = [
    "BUSY_MESSAGES",
    "ApplyOutcome",
    "ApplyPipeline",
    "DeviceState",
    "join_errors",
    "parse_frame_rate",
    "parse_resolution",
]
