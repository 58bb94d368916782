"""!
@brief Value adjustment engine.
@details :func:`adjust` computes the next value of a setting from a
directional delta. It performs no policy checks; callers confirm visibility,
dependency locks and busy locks first.
"""
from __future__ import annotations

from .catalog import SettingDefinition, SettingKind, SettingValue

ARROW_DELTA = 1
PAGE_DELTA = 10


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def adjust(definition: SettingDefinition, current: SettingValue, delta: int) -> SettingValue:
    """!
    @brief Return the value ``definition`` takes after moving ``delta`` steps.
    @details Range values move by ``delta * step`` and clamp to
    ``[minimum, maximum]``. Select values move through ``options`` by ``delta``
    positions and clamp at either end rather than wrapping; a current value
    missing from ``options`` counts as the first option. Toggles ignore
    ``delta`` and flip.
    @param definition Catalog entry being adjusted.
    @param current Current value of the entry.
    @param delta Signed step count (``0`` for the activate action).
    @returns The new value.
    """

    if definition.kind is SettingKind.TOGGLE:
        return not bool(current)

    if definition.kind is SettingKind.SELECT:
        options = definition.options
        if not options:
            return current
        try:
            index = options.index(str(current))
        except ValueError:
            index = 0
        return options[_clamp(index + delta, 0, len(options) - 1)]

    step = definition.step or 1
    return _clamp(int(current) + delta * step, definition.minimum, definition.maximum)


__all__ = ["ARROW_DELTA", "PAGE_DELTA", "adjust"]
