"""!
@brief Busy/lockout policy for exclusive-access settings.
@details Resolution, pixel format and frame rate reconfigure the stream and
cannot change while another application holds the camera. Every other
setting ignores the busy state.
"""
from __future__ import annotations

from . import constants

BUSY_REJECTION_MESSAGE = "Cannot change: camera is in use"


def is_exclusive_access(key: str) -> bool:
    return key in constants.EXCLUSIVE_ACCESS_KEYS


def may_mutate(key: str, device_busy: bool) -> bool:
    """!
    @brief Decide whether ``key`` may be changed given the device busy state.
    """

    return not (device_busy and is_exclusive_access(key))


def is_busy_locked(key: str, device_busy: bool) -> bool:
    return not may_mutate(key, device_busy)


__all__ = ["BUSY_REJECTION_MESSAGE", "is_busy_locked", "is_exclusive_access", "may_mutate"]
