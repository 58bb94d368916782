"""!
@brief Static data for LogiCam Control.
@details Centralises the device defaults, ``v4l2-ctl`` control names, the fixed
select option domains, the dependency and exclusive-access tables, and the
composite optimal/default profiles so the catalog, the policies and the
backend work from a single source of truth.
"""
from __future__ import annotations

from typing import Dict, Mapping, Tuple

DEFAULT_DEVICE = "/dev/video0"
DEVICE_ENV_VAR = "LOGICAM_DEVICE"
V4L2_CTL = "v4l2-ctl"
V4L2_PACKAGE = "v4l-utils"
DEVICE_MODEL = "Logitech C920"

NOTIFICATION_SECONDS = 2.0
"""!
@brief Lifetime of a transient notification before it is hidden.
"""

DEFAULT_REFRESH_MS = 100

# ---------------------------------------------------------------------------
# Setting keys
# ---------------------------------------------------------------------------

RESOLUTION = "resolution"
PIXEL_FORMAT = "format"
FRAME_RATE = "framerate"
BRIGHTNESS = "brightness"
CONTRAST = "contrast"
SATURATION = "saturation"
SHARPNESS = "sharpness"
GAIN = "gain"
AUTO_EXPOSURE = "auto_exposure"
EXPOSURE_VALUE = "exposure_value"
AUTO_FOCUS = "auto_focus"
FOCUS_VALUE = "focus_value"
AUTO_WHITE_BALANCE = "auto_white_balance"
WHITE_BALANCE_VALUE = "white_balance_value"
POWER_LINE_FREQUENCY = "power_line_frequency"

EXCLUSIVE_ACCESS_KEYS = frozenset({RESOLUTION, PIXEL_FORMAT, FRAME_RATE})
"""!
@brief Settings that reconfigure the stream and need exclusive device access.
"""

DEPENDENCY_RULES: Mapping[str, str] = {
    EXPOSURE_VALUE: AUTO_EXPOSURE,
    FOCUS_VALUE: AUTO_FOCUS,
    WHITE_BALANCE_VALUE: AUTO_WHITE_BALANCE,
}
"""!
@brief Manual value key mapped to the automatic mode that governs it.
"""

# ---------------------------------------------------------------------------
# Select option domains
# ---------------------------------------------------------------------------

RESOLUTION_OPTIONS: Tuple[str, ...] = (
    "640x480",
    "800x600",
    "1024x576",
    "1280x720",
    "1920x1080",
)
PIXEL_FORMAT_OPTIONS: Tuple[str, ...] = ("YUYV", "MJPG")
FRAME_RATE_OPTIONS: Tuple[str, ...] = ("5fps", "10fps", "15fps", "20fps", "24fps", "30fps")

POWER_LINE_LABELS: Mapping[int, str] = {0: "Disabled", 1: "50Hz", 2: "60Hz"}
POWER_LINE_OPTIONS: Tuple[str, ...] = tuple(POWER_LINE_LABELS.values())
POWER_LINE_UNKNOWN = "Unknown"

# ---------------------------------------------------------------------------
# Driver control names and hardware ranges
# ---------------------------------------------------------------------------

V4L2_CONTROLS: Dict[str, str] = {
    BRIGHTNESS: "brightness",
    CONTRAST: "contrast",
    SATURATION: "saturation",
    SHARPNESS: "sharpness",
    GAIN: "gain",
    AUTO_EXPOSURE: "auto_exposure",
    AUTO_FOCUS: "focus_automatic_continuous",
    AUTO_WHITE_BALANCE: "white_balance_automatic",
    POWER_LINE_FREQUENCY: "power_line_frequency",
    EXPOSURE_VALUE: "exposure_time_absolute",
    FOCUS_VALUE: "focus_absolute",
    WHITE_BALANCE_VALUE: "white_balance_temperature",
}
BACKLIGHT_COMPENSATION_CONTROL = "backlight_compensation"

# ``auto_exposure`` is a menu control: 3 is aperture priority, 1 is manual.
AUTO_EXPOSURE_ON = 3
AUTO_EXPOSURE_OFF = 1

CONTROL_LIMITS: Mapping[str, Tuple[int, int]] = {
    BRIGHTNESS: (0, 255),
    CONTRAST: (0, 255),
    SATURATION: (0, 255),
    SHARPNESS: (0, 255),
    GAIN: (0, 255),
    POWER_LINE_FREQUENCY: (0, 2),
    EXPOSURE_VALUE: (3, 2047),
    FOCUS_VALUE: (0, 250),
    WHITE_BALANCE_VALUE: (2000, 6500),
}

FALLBACK_CONTROL_VALUES: Mapping[str, int] = {
    BRIGHTNESS: 128,
    CONTRAST: 128,
    SATURATION: 128,
    SHARPNESS: 128,
    GAIN: 0,
    POWER_LINE_FREQUENCY: 2,
    EXPOSURE_VALUE: 250,
    FOCUS_VALUE: 0,
    WHITE_BALANCE_VALUE: 4000,
}
"""!
@brief Values reported when a control cannot be read from the device.
"""

FALLBACK_FORMAT = (640, 480, "YUYV", 30.0)

# ---------------------------------------------------------------------------
# Composite profiles
# ---------------------------------------------------------------------------

OPTIMAL_FORMAT = (1920, 1080, "MJPG")
OPTIMAL_FRAME_RATE = 30
DEFAULT_FORMAT = (640, 480, "YUYV")
DEFAULT_FRAME_RATE = 30

