"""!
@brief Ordered catalog of every adjustable camera setting.
@details :func:`build_catalog` pairs each fixed :class:`SettingDefinition`
with its current value derived from a :class:`~logicam.models.DeviceSettings`
and :class:`~logicam.models.VideoFormat` snapshot. The function is pure and is
re-run after every resync; catalog order is navigation order.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from . import constants as c
from .models import DeviceSettings, VideoFormat

SettingValue = Union[int, bool, str]


class SettingKind(str, Enum):
    RANGE = "range"
    TOGGLE = "toggle"
    SELECT = "select"


@dataclass(frozen=True)
class SettingDefinition:
    """!
    @brief Immutable description of one catalog slot.
    @details ``minimum``/``maximum``/``step`` apply to range settings only and
    ``options`` to select settings only.
    """

    key: str
    label: str
    kind: SettingKind
    minimum: int = 0
    maximum: int = 255
    step: int = 1
    options: Tuple[str, ...] = ()


def _range(key: str, label: str, step: int = 1) -> SettingDefinition:
    low, high = c.CONTROL_LIMITS[key]
    return SettingDefinition(key, label, SettingKind.RANGE, minimum=low, maximum=high, step=step)


def _toggle(key: str, label: str) -> SettingDefinition:
    return SettingDefinition(key, label, SettingKind.TOGGLE)


def _select(key: str, label: str, options: Tuple[str, ...]) -> SettingDefinition:
    return SettingDefinition(key, label, SettingKind.SELECT, options=options)


DEFINITIONS: Tuple[SettingDefinition, ...] = (
    _select(c.RESOLUTION, "Resolution", c.RESOLUTION_OPTIONS),
    _select(c.PIXEL_FORMAT, "Pixel Format", c.PIXEL_FORMAT_OPTIONS),
    _select(c.FRAME_RATE, "Frame Rate", c.FRAME_RATE_OPTIONS),
    _range(c.BRIGHTNESS, "Brightness"),
    _range(c.CONTRAST, "Contrast"),
    _range(c.SATURATION, "Saturation"),
    _range(c.SHARPNESS, "Sharpness"),
    _range(c.GAIN, "Gain/ISO"),
    _toggle(c.AUTO_EXPOSURE, "Auto Exposure"),
    _range(c.EXPOSURE_VALUE, "  └─ Exposure Value"),
    _toggle(c.AUTO_FOCUS, "Auto Focus"),
    _range(c.FOCUS_VALUE, "  └─ Focus Value", step=5),
    _toggle(c.AUTO_WHITE_BALANCE, "Auto White Balance"),
    _range(c.WHITE_BALANCE_VALUE, "  └─ White Balance Temp", step=10),
    _select(c.POWER_LINE_FREQUENCY, "Power Line Filter", c.POWER_LINE_OPTIONS),
)

DEFINITIONS_BY_KEY = {definition.key: definition for definition in DEFINITIONS}


def get_definition(key: str) -> SettingDefinition:
    return DEFINITIONS_BY_KEY[key]


def power_line_label(frequency: int) -> str:
    return c.POWER_LINE_LABELS.get(frequency, c.POWER_LINE_UNKNOWN)


def power_line_value(label: str) -> int:
    """!
    @brief Map a power line label back to the driver enum (``Disabled`` for unknown labels).
    """

    for value, candidate in c.POWER_LINE_LABELS.items():
        if candidate == label:
            return value
    return 0


def _current_value(
    definition: SettingDefinition, settings: DeviceSettings, video_format: VideoFormat
) -> SettingValue:
    key = definition.key
    if key == c.RESOLUTION:
        return video_format.resolution
    if key == c.PIXEL_FORMAT:
        return video_format.pixel_format
    if key == c.FRAME_RATE:
        return video_format.frame_rate_label
    if key == c.POWER_LINE_FREQUENCY:
        return power_line_label(settings.power_line_frequency)
    raw = getattr(settings, key)
    if definition.kind is SettingKind.TOGGLE:
        return bool(raw)
    return max(definition.minimum, min(definition.maximum, int(raw)))


def build_catalog(
    settings: DeviceSettings, video_format: VideoFormat
) -> List[Tuple[SettingDefinition, SettingValue]]:
    """!
    @brief Pair every catalog definition with its current value, in catalog order.
    @param settings Latest control snapshot from the backend.
    @param video_format Latest canonical format snapshot from the backend.
    @returns Ordered ``(definition, value)`` pairs.
    """

    return [
        (definition, _current_value(definition, settings, video_format))
        for definition in DEFINITIONS
    ]


__all__ = [
    "DEFINITIONS",
    "SettingDefinition",
    "SettingKind",
    "SettingValue",
    "build_catalog",
    "get_definition",
    "power_line_label",
    "power_line_value",
]
