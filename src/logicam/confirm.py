"""!
@brief Shared confirmation text and prompt for the factory reset.
@details The TUI confirm dialog and the ``--reset`` command-line mode ask the
same question, so the wording lives here once.
"""

from __future__ import annotations

import sys
from typing import Callable

RESET_CONFIRM_TITLE = "Reset to Factory Defaults"
RESET_CONFIRM_MESSAGE = (
    "This will reset all settings to factory defaults.\n"
    "Are you sure you want to continue?"
)
CONFIRM_PROMPT = f"{RESET_CONFIRM_MESSAGE.replace(chr(10), ' ')} (y/N)"


def request_reset_confirmation(
    *,
    force: bool,
    input_func: Callable[[str], str] | None = None,
    interactive: bool | None = None,
) -> bool:
    """!
    @brief Ask the user to confirm a reset from the command line.
    @details ``--yes`` bypasses the prompt. Non-interactive contexts default to
    acceptance so scripted invocations are not blocked on stdin.
    @param force Whether the caller supplied ``--yes``.
    @param input_func Optional input function override.
    @param interactive Optional override to signal if stdin is interactive.
    @returns ``True`` when the reset should proceed.
    """

    if force:
        return True

    if interactive is None:
        stdin = getattr(sys, "stdin", None)
        isatty = getattr(stdin, "isatty", None)
        interactive = bool(isatty and isatty())

    if not interactive:
        return True

    if input_func is None:
        input_func = input

    try:
        response = input_func(f"{CONFIRM_PROMPT} ")
    except EOFError:
        return False

    return response.strip().lower() in ("y", "yes")


__all__ = [
    "CONFIRM_PROMPT",
    "RESET_CONFIRM_MESSAGE",
    "RESET_CONFIRM_TITLE",
    "request_reset_confirmation",
]
