"""!
@brief Modal dialog state machine.
@details A single :class:`DialogState` slot holds the active overlay. While it
is anything other than :attr:`DialogKind.NONE` the machine consumes every key:
Help, Info and Error close on Enter, Escape or ``q``; Confirm runs its pending
action on ``y``/``Y`` after closing and cancels on ``n``/``N``/Escape. Any
other key is swallowed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from . import confirm

INFO_TITLE = "Detailed Camera Information"
HELP_TITLE = "LogiCam Control - Help"

DISMISS_KEYS = frozenset({"enter", "escape", "q"})
ACCEPT_KEYS = frozenset({"y", "Y"})
DECLINE_KEYS = frozenset({"n", "N", "escape"})


class DialogKind(str, Enum):
    NONE = "none"
    HELP = "help"
    INFO = "info"
    CONFIRM = "confirm"
    ERROR = "error"


@dataclass(frozen=True)
class DialogState:
    kind: DialogKind = DialogKind.NONE
    title: str = ""
    message: str = ""


CLOSED = DialogState()


class DialogMachine:
    """!
    @brief Owner of the one dialog slot and the confirmed action awaiting it.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.state: DialogState = CLOSED
        self._pending_action: Callable[[], None] | None = None
        self._logger = logger

    @property
    def active(self) -> bool:
        return self.state.kind is not DialogKind.NONE

    @property
    def kind(self) -> DialogKind:
        return self.state.kind

    def _open(self, state: DialogState, action: Callable[[], None] | None = None) -> None:
        self.state = state
        self._pending_action = action
        if self._logger is not None:
            self._logger.info("Dialog opened: %s %s", state.kind.value, state.title)

    def open_help(self) -> None:
        self._open(DialogState(DialogKind.HELP, HELP_TITLE))

    def open_info(self, message: str) -> None:
        self._open(DialogState(DialogKind.INFO, INFO_TITLE, message))

    def open_confirm(self, title: str, message: str, on_confirm: Callable[[], None]) -> None:
        self._open(DialogState(DialogKind.CONFIRM, title, message), on_confirm)

    def open_reset_confirm(self, on_confirm: Callable[[], None]) -> None:
        self.open_confirm(confirm.RESET_CONFIRM_TITLE, confirm.RESET_CONFIRM_MESSAGE, on_confirm)

    def open_error(self, title: str, message: str) -> None:
        self._open(DialogState(DialogKind.ERROR, title, message))

    def close(self) -> None:
        self.state = CLOSED
        self._pending_action = None

    def handle_key(self, key: str) -> bool:
        """!
        @brief Route a key to the active dialog.
        @returns ``True`` when the key was consumed, which is always the case
        while a dialog is open.
        """

        if not self.active:
            return False

        if self.state.kind is DialogKind.CONFIRM:
            if key in ACCEPT_KEYS:
                action = self._pending_action
                self.close()
                if action is not None:
                    action()
            elif key in DECLINE_KEYS:
                self.close()
            return True

        if key in DISMISS_KEYS:
            self.close()
        return True


__all__ = [
    "CLOSED",
    "DialogKind",
    "DialogMachine",
    "DialogState",
    "HELP_TITLE",
    "INFO_TITLE",
]
