"""!
@brief Navigation controller: top-level dispatcher for decoded keys.
@details The controller owns the selection cursor and composes the dialog
machine, the lockout and dependency policies, the adjustment engine and the
apply pipeline. Dialog gating runs before anything else; while a dialog is
open no navigation or adjustment logic sees the key.
"""
from __future__ import annotations

from typing import List

from . import logging_ext
from .adjust import ARROW_DELTA, PAGE_DELTA, adjust
from .apply import ApplyPipeline, DeviceState
from .catalog import SettingKind
from .dependencies import VisibleSetting, controlling_label, is_locked, visible_settings
from .dialogs import DialogMachine
from .lockout import BUSY_REJECTION_MESSAGE, may_mutate
from .models import DeviceBackend
from .notifications import NotificationService, Severity

ADJUST_DELTAS = {
    "left": -ARROW_DELTA,
    "right": ARROW_DELTA,
    "page_up": -PAGE_DELTA,
    "page_down": PAGE_DELTA,
    "enter": 0,
}
QUIT_KEYS = frozenset({"q", "Q", "ctrl_c"})
OPTIMIZE_KEYS = frozenset({"o", "O"})
RESET_KEYS = frozenset({"r", "R"})
INFO_KEYS = frozenset({"i", "I"})
HELP_KEYS = frozenset({"h", "H", "?"})


class NavigationController:
    """!
    @brief Interactive state engine behind the TUI.
    @details ``running`` turns ``False`` once a quit key is handled; the
    pending notification timer is cancelled at that point.
    """

    def __init__(
        self,
        backend: DeviceBackend,
        *,
        notifications: NotificationService | None = None,
        dialogs: DialogMachine | None = None,
    ) -> None:
        self.human_logger = logging_ext.get_human_logger()
        self.machine_logger = logging_ext.get_machine_logger()
        self.backend = backend
        self.notifications = notifications or NotificationService()
        self.dialogs = dialogs or DialogMachine(self.human_logger)
        self.pipeline = ApplyPipeline(backend, self.notifications, self.dialogs)
        self.selected_index = 0
        self.running = True

    # -----------------------------------------------------------------------
    # Derived views
    # -----------------------------------------------------------------------

    @property
    def state(self) -> DeviceState:
        return self.pipeline.state

    @property
    def device_busy(self) -> bool:
        return self.pipeline.state.device_busy

    def visible_settings(self) -> List[VisibleSetting]:
        state = self.pipeline.state
        return visible_settings(state.settings, state.video_format, state.device_busy)

    def current_setting(self) -> VisibleSetting | None:
        entries = self.visible_settings()
        if not entries:
            return None
        return entries[max(0, min(self.selected_index, len(entries) - 1))]

    def _clamp_selection(self) -> None:
        count = len(self.visible_settings())
        self.selected_index = max(0, min(self.selected_index, count - 1))

    # -----------------------------------------------------------------------
    # Dispatch
    # -----------------------------------------------------------------------

    def handle_key(self, key: str) -> None:
        """!
        @brief Process one decoded key token.
        """

        if not key:
            return
        if self.dialogs.handle_key(key):
            self._clamp_selection()
            return

        if key == "up":
            self.move_selection(-1)
        elif key == "down":
            self.move_selection(1)
        elif key in ADJUST_DELTAS:
            self.adjust_current(ADJUST_DELTAS[key])
        elif key in OPTIMIZE_KEYS:
            self._log_action("optimize")
            self.pipeline.optimize()
            self._clamp_selection()
        elif key in RESET_KEYS:
            self._log_action("reset_requested")
            self.dialogs.open_reset_confirm(self._confirmed_reset)
        elif key in INFO_KEYS:
            self._log_action("info")
            self.dialogs.open_info(self.backend.get_detailed_info())
        elif key in HELP_KEYS:
            self.dialogs.open_help()
        elif key in QUIT_KEYS:
            self.quit()

    def move_selection(self, offset: int) -> None:
        count = len(self.visible_settings())
        if count == 0:
            self.selected_index = 0
            return
        self.selected_index = max(0, min(count - 1, self.selected_index + offset))

    def adjust_current(self, delta: int) -> None:
        """!
        @brief Adjust the selected setting after the busy and dependency checks.
        @details A rejected change never reaches the pipeline. A change that
        leaves the value as it was makes no backend call.
        """

        setting = self.current_setting()
        if setting is None:
            return
        key = setting.key
        state = self.pipeline.state

        if not may_mutate(key, state.device_busy):
            self.notifications.notify(BUSY_REJECTION_MESSAGE, Severity.ERROR)
            self.human_logger.info("Rejected change to %s: device busy", key)
            return

        if is_locked(key, state.settings):
            self.notifications.notify(
                f"Cannot adjust: {controlling_label(key)} is enabled", Severity.ERROR
            )
            return

        new_value = adjust(setting.definition, setting.value, delta)
        if setting.definition.kind is not SettingKind.TOGGLE and new_value == setting.value:
            return

        self.pipeline.apply(key, new_value)
        self._clamp_selection()

    def _confirmed_reset(self) -> None:
        self._log_action("reset")
        self.pipeline.reset_to_defaults()
        self._clamp_selection()

    def quit(self) -> None:
        self._log_action("quit")
        self.running = False
        self.notifications.shutdown()

    def _log_action(self, action: str) -> None:
        self.machine_logger.info("ui_action", extra={"event": "ui_action", "action": action})


__all__ = ["NavigationController"]
