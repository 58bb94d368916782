"""!
@file tui_render.py
@brief Rendering mixin for the LogiCam TUI.

@details Contains the TUIRendererMixin class that turns the navigation
controller's state into screen lines: header, device panel, the settings
list, the shortcut footer, the notification toast and the modal dialogs. The
mixin reads state only; it never calls the backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from . import constants, version
from .catalog import SettingKind
from .dialogs import DialogKind, DialogState
from .notifications import Severity
from .tui_helpers import Style, clear_screen, divider, pad_ansi, percentage, render_progress_bar

if TYPE_CHECKING:
    from .controller import NavigationController
    from .dependencies import VisibleSetting

LABEL_WIDTH = 28
BAR_WIDTH = 20

HELP_SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Keyboard Navigation",
        (
            "↑ ↓          Navigate between settings",
            "← →          Adjust values / Change options",
            "Enter        Toggle boolean settings",
            "PgUp / PgDn  Adjust by ±10 (for range values)",
        ),
    ),
    (
        "Quick Actions",
        (
            "O            Apply optimal settings for best quality",
            "R            Reset all settings to factory defaults",
            "I            Show detailed camera information",
            "H / ?        Show this help screen",
            "Q / Ctrl+C   Quit application",
        ),
    ),
    (
        "Setting Types",
        (
            "Range        Numeric values with progress bars",
            "Toggle       Boolean ON/OFF switches",
            "Select       Predefined option lists",
        ),
    ),
    (
        "Optimal Settings",
        (
            "• 1920x1080 @ 30fps in MJPG format",
            "• Auto exposure, focus, and white balance",
            "• Balanced picture quality settings",
            "• 60Hz power line filter (for most regions)",
        ),
    ),
)

BUSY_HINT_LINES = (
    "Some settings could not be changed because the camera is being used",
    "by another application. Close those applications and try again.",
)

_SEVERITY_STYLE = {
    Severity.SUCCESS: ("✓", "green"),
    Severity.ERROR: ("✗", "red"),
    Severity.INFO: ("ℹ", "yellow"),
}


class TUIRendererMixin:
    """!
    @brief Mixin providing rendering methods for the LogiCam screen.
    @details This mixin expects the following attributes on the class:
    - controller: NavigationController
    - device_path: str
    - stream: TextIO
    - width: int
    - style: Style
    """

    controller: "NavigationController"
    device_path: str
    stream: TextIO
    width: int
    style: Style

    def _render(self) -> None:
        """!
        @brief Render the full screen, or the active dialog in place of it.
        """

        clear_screen(self.stream)
        dialog = self.controller.dialogs.state
        if dialog.kind is DialogKind.NONE:
            lines = self._render_main()
        else:
            lines = self._render_dialog(dialog)
        self.stream.write("\n".join(lines) + "\n")
        self.stream.flush()

    def _render_main(self) -> list[str]:
        width = self.width
        lines = self._render_header()
        lines.append(divider(width))
        lines.extend(self._render_device_panel())
        lines.append(divider(width))
        lines.append(self.style.paint("Camera Settings & Configuration", "magenta", bold=True))
        lines.append("")
        lines.extend(self._render_settings())
        lines.append(divider(width))
        lines.extend(self._render_footer())
        lines.extend(self._render_notification())
        return lines

    def _render_header(self) -> list[str]:
        metadata = version.build_info()
        title = self.style.paint(f"LogiCam Control {metadata['version']}", "cyan", bold=True)
        subtitle = self.style.paint(f"{constants.DEVICE_MODEL} Professional Webcam Controller", dim=True)
        return [title, subtitle]

    def _render_device_panel(self) -> list[str]:
        state = self.controller.state
        fmt = state.video_format
        settings = state.settings
        if state.device_busy:
            status = self.style.paint("⚠ IN USE", "red", bold=True)
        elif not state.status.available:
            status = self.style.paint(f"✗ {state.status.error or 'Unavailable'}", "red", bold=True)
        else:
            status = self.style.paint("✓ Available", "green", bold=True)

        left = [
            self.style.paint("Device Information", "cyan", bold=True),
            f"Device Path:  {self.device_path}",
            f"Model:        {constants.DEVICE_MODEL}",
            f"Status:       {status}",
        ]
        middle = [
            self.style.paint("Current Format", "yellow", bold=True),
            f"Resolution:   {fmt.resolution}",
            f"Pixel Format: {fmt.pixel_format}",
            f"Frame Rate:   {fmt.frame_rate:g} fps",
        ]
        right = [
            self.style.paint("Quick Stats", "yellow", bold=True),
            f"Brightness: {settings.brightness}/255",
            f"Contrast:   {settings.contrast}/255",
            f"Saturation: {settings.saturation}/255",
        ]
        column = max(24, (self.width - 2) // 3)
        return [
            pad_ansi(a, column) + " " + pad_ansi(b, column) + " " + c
            for a, b, c in zip(left, middle, right)
        ]

    def _render_settings(self) -> list[str]:
        entries = self.controller.visible_settings()
        selected = self.controller.selected_index
        return [
            self._render_setting_row(entry, index == selected)
            for index, entry in enumerate(entries)
        ]

    def _render_setting_row(self, entry: "VisibleSetting", is_selected: bool) -> str:
        definition = entry.definition
        color = "white"
        if definition.kind is SettingKind.RANGE:
            value = int(entry.value)
            pct = percentage(value, definition.maximum)
            bar = render_progress_bar(value, definition.maximum, BAR_WIDTH)
            display = f"{bar} {value:>4} {pct:>3}%"
            if entry.locked:
                color = "gray"
            else:
                color = "green" if pct > 66 else "yellow" if pct > 33 else "red"
        elif definition.kind is SettingKind.TOGGLE:
            display = "● ON " if entry.value else "○ OFF"
            color = "green" if entry.value else "red"
        else:
            display = str(entry.value)
            color = "cyan"
            if entry.busy_locked:
                display = f"{display} 🔒"
                color = "gray"

        label = definition.label.ljust(LABEL_WIDTH)
        if is_selected:
            return self.style.invert(f"▶ {label} {display}")
        return f"  {self.style.paint(label, dim=True)} {self.style.paint(display, color)}"

    def _render_footer(self) -> list[str]:
        current = self.controller.current_setting()
        hints = ["↑↓ Select"]
        if current is not None:
            kind = current.definition.kind
            if kind is SettingKind.RANGE:
                hints.append(f"←→ Adjust ±{current.definition.step}")
                hints.append("PgUp/Dn ±10")
            elif kind is SettingKind.TOGGLE:
                hints.append("⏎ Toggle")
            else:
                hints.append("←→ Change")
        actions = ["[O] Optimize", "[R] Reset", "[I] Info", "[H] Help", "[Q] Quit"]
        return [
            self.style.paint("Navigation: ", "yellow", bold=True) + self.style.paint(" • ".join(hints), dim=True),
            self.style.paint("Quick Actions: ", "yellow", bold=True)
            + self.style.paint(" • ".join(actions), dim=True),
        ]

    def _render_notification(self) -> list[str]:
        notification = self.controller.notifications.state
        if not notification.visible:
            return []
        icon, color = _SEVERITY_STYLE[notification.severity]
        return ["", self.style.paint(f"{icon} {notification.message}", color, bold=True)]

    # -----------------------------------------------------------------------
    # Dialog overlays
    # -----------------------------------------------------------------------

    def _render_dialog(self, dialog: DialogState) -> list[str]:
        if dialog.kind is DialogKind.HELP:
            body = self._render_help()
        elif dialog.kind is DialogKind.INFO:
            body = self._render_info(dialog)
        elif dialog.kind is DialogKind.CONFIRM:
            body = self._render_confirm(dialog)
        else:
            body = self._render_error(dialog)
        frame = divider(self.width, "═")
        return [frame, *body, frame]

    def _render_help(self) -> list[str]:
        lines = [self.style.paint(self.controller.dialogs.state.title, "cyan", bold=True), ""]
        for heading, rows in HELP_SECTIONS:
            lines.append(self.style.paint(heading, "yellow", bold=True))
            lines.extend(self.style.paint(f"  {row}", dim=True) for row in rows)
            lines.append("")
        lines.append(self.style.paint("Press Enter, Esc or Q to close", "gray"))
        return lines

    def _render_info(self, dialog: DialogState) -> list[str]:
        lines = [self.style.paint(dialog.title, "cyan", bold=True), ""]
        lines.extend(dialog.message.splitlines())
        lines.append("")
        lines.append(self.style.paint("Press Enter, Esc or Q to close", "gray"))
        return lines

    def _render_confirm(self, dialog: DialogState) -> list[str]:
        lines = [self.style.paint(f"⚠ {dialog.title}", "red", bold=True), ""]
        lines.extend(dialog.message.splitlines())
        lines.append("")
        lines.append(self.style.invert(" Y  Yes ") + "  " + self.style.invert(" N  No "))
        return lines

    def _render_error(self, dialog: DialogState) -> list[str]:
        lines = [self.style.paint(f"⚠ {dialog.title}", "yellow", bold=True), ""]
        lines.append(self.style.paint(dialog.message, "yellow"))
        lines.append("")
        lines.extend(self.style.paint(line, dim=True) for line in BUSY_HINT_LINES)
        lines.append("")
        lines.append(self.style.paint("Press Enter, Esc or Q to continue", "gray"))
        return lines


__all__ = ["HELP_SECTIONS", "TUIRendererMixin"]
