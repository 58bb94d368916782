"""!
@brief Text-based user interface (TUI) engine.
@details Drives the co-operative event loop: each turn ticks the notification
timer, waits up to the refresh interval for a key, hands the decoded key to
the :class:`~logicam.controller.NavigationController`, and re-renders when
anything changed. Backend calls happen inside ``handle_key`` and therefore
block the loop, which keeps device access serialised.
"""
from __future__ import annotations

import sys
from typing import Callable, Mapping, MutableMapping, Optional, TextIO

from .controller import NavigationController
from .notifications import NotificationService
from .tui_helpers import RawTerminal, Style, decode_key, hide_cursor, show_cursor, supports_ansi
from .tui_render import TUIRendererMixin

DEFAULT_WIDTH = 96


class LogiCamTUI(TUIRendererMixin):
    """!
    @brief Coordinates rendering, key input and the navigation controller.
    @details ``app_state`` supplies the parsed ``args``, both loggers and the
    device ``backend``. Tests may inject ``key_reader`` (called with the poll
    timeout, returning a raw key or ``""``), ``clock`` and ``stream``.
    """

    def __init__(self, app_state: Mapping[str, object]) -> None:
        self.app_state: MutableMapping[str, object] = dict(app_state)
        self.human_logger = self.app_state.get("human_logger")
        self.machine_logger = self.app_state.get("machine_logger")
        args = self.app_state.get("args")

        refresh_ms = getattr(args, "tui_refresh", 100) if args is not None else 100
        try:
            refresh_value = float(refresh_ms) / 1000.0
        except (TypeError, ValueError):
            refresh_value = 0.1
        self.refresh_interval = 0.05 if refresh_value <= 0 else refresh_value

        self.device_path = str(getattr(args, "device", "") or "")
        self.stream: TextIO = self.app_state.get("stream") or sys.stdout  # type: ignore[assignment]
        self.width = DEFAULT_WIDTH
        self.style = Style(enabled=not getattr(args, "no_color", False) and supports_ansi(self.stream))

        clock = self.app_state.get("clock")
        notifications = NotificationService(clock=clock) if clock else NotificationService()
        self.controller = NavigationController(
            self.app_state["backend"],  # type: ignore[arg-type]
            notifications=notifications,
        )
        self._key_reader: Optional[Callable[[float], str]] = self.app_state.get(
            "key_reader"
        )  # type: ignore[assignment]

    def run(self) -> None:
        """!
        @brief Enter the TUI event loop until a quit key is handled.
        """

        if self._key_reader is not None:
            self._loop(self._key_reader)
            return
        with RawTerminal() as terminal:
            hide_cursor(self.stream)
            try:
                self._loop(terminal.read_key)
            finally:
                show_cursor(self.stream)

    def _loop(self, reader: Callable[[float], str]) -> None:
        self._notify("tui.start", "Interactive TUI started.")
        self._render()
        try:
            while self.controller.running:
                dirty = self.controller.notifications.tick()
                try:
                    raw = reader(self.refresh_interval)
                except StopIteration:
                    self.controller.quit()
                    break
                key = decode_key(raw)
                if key:
                    self.controller.handle_key(key)
                    dirty = True
                if dirty and self.controller.running:
                    self._render()
        finally:
            self.controller.notifications.shutdown()
        self._notify("tui.exit", "User requested exit from TUI.")

    def _notify(self, event: str, message: str) -> None:
        if self.human_logger:
            self.human_logger.info(message)  # type: ignore[union-attr]
        if self.machine_logger:
            self.machine_logger.info(  # type: ignore[union-attr]
                event, extra={"event": event, "message": message}
            )


def run_tui(app_state: Mapping[str, object]) -> None:
    """!
    @brief Convenience wrapper to launch the TUI.
    """

    LogiCamTUI(app_state).run()


__all__ = ["LogiCamTUI", "run_tui"]
