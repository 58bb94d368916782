"""!
@brief Dependency resolver hiding manual values governed by an automatic mode.
@details Both predicates are table driven from
:data:`logicam.constants.DEPENDENCY_RULES`. Keys absent from the table are
always visible and never locked. Visibility and locking are evaluated
independently of the busy policy in :mod:`logicam.lockout`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from . import constants
from .catalog import SettingDefinition, SettingValue, build_catalog, get_definition
from .lockout import is_busy_locked
from .models import DeviceSettings, VideoFormat


@dataclass(frozen=True)
class VisibleSetting:
    """!
    @brief A catalog entry that survived dependency filtering.
    """

    definition: SettingDefinition
    value: SettingValue
    locked: bool = False
    busy_locked: bool = False

    @property
    def key(self) -> str:
        return self.definition.key


def _controlling_flag(key: str, settings: DeviceSettings) -> bool:
    controller = constants.DEPENDENCY_RULES.get(key)
    if controller is None:
        return False
    return bool(getattr(settings, controller))


def is_visible(key: str, settings: DeviceSettings) -> bool:
    return not _controlling_flag(key, settings)


def is_locked(key: str, settings: DeviceSettings) -> bool:
    return _controlling_flag(key, settings)


def controlling_label(key: str) -> str:
    """!
    @brief Label of the automatic mode governing ``key`` (for user feedback).
    """

    controller = constants.DEPENDENCY_RULES.get(key)
    if controller is None:
        return "Auto setting"
    return get_definition(controller).label


def visible_settings(
    settings: DeviceSettings, video_format: VideoFormat, device_busy: bool = False
) -> List[VisibleSetting]:
    """!
    @brief Filter the catalog down to the entries that take part in navigation.
    """

    return [
        VisibleSetting(
            definition=definition,
            value=value,
            locked=is_locked(definition.key, settings),
            busy_locked=is_busy_locked(definition.key, device_busy),
        )
        for definition, value in build_catalog(settings, video_format)
        if is_visible(definition.key, settings)
    ]


__all__ = [
    "VisibleSetting",
    "controlling_label",
    "is_locked",
    "is_visible",
    "visible_settings",
]
