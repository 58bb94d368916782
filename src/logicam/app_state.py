"""!
@brief Shared application state typing helpers for UI layers.
@details Defines the mapping structure exchanged between :mod:`main` and
:mod:`tui` so MyPy can validate cross-module access to loggers, the device
backend and the injectable input hooks without resorting to ``Any``.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from typing import TextIO, TypedDict

from .models import DeviceBackend


class _RequiredAppState(TypedDict):
    args: argparse.Namespace
    human_logger: logging.Logger
    machine_logger: logging.Logger
    backend: DeviceBackend


class AppState(_RequiredAppState, total=False):
    key_reader: Callable[[float], str]
    clock: Callable[[], float]
    stream: TextIO
