"""!
@file tui_helpers.py
@brief Terminal helpers for the LogiCam TUI.

@details Provides standalone utilities for ANSI support detection, raw-mode
key capture on POSIX terminals, key decoding into the tokens understood by the
navigation controller, colour styling and progress bars. None of these
helpers depend on controller state.
"""

from __future__ import annotations

import os
import re
import select
import sys
import termios
import tty
from typing import TextIO

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
ESCAPE_SEQUENCE_TIMEOUT = 0.05


# ---------------------------------------------------------------------------
# ANSI support and terminal utilities
# ---------------------------------------------------------------------------


def supports_ansi(stream: object | None = None) -> bool:
    """!
    @brief Determine whether the stream is an interactive terminal that renders ANSI.
    """

    target = stream if stream is not None else sys.stdout
    isatty = getattr(target, "isatty", None)
    if isatty is None:
        return False
    try:
        if not isatty():
            return False
    except (OSError, ValueError):
        return False
    return os.environ.get("TERM", "").lower() != "dumb"


def clear_screen(stream: TextIO | None = None) -> None:
    """Clear the terminal screen and move cursor to top-left."""
    target = stream or sys.stdout
    target.write("\x1b[2J\x1b[H")
    target.flush()


def hide_cursor(stream: TextIO | None = None) -> None:
    (stream or sys.stdout).write("\x1b[?25l")


def show_cursor(stream: TextIO | None = None) -> None:
    target = stream or sys.stdout
    target.write("\x1b[?25h")
    target.flush()


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text to get visible length."""
    return _ANSI_RE.sub("", text)


def visible_len(text: str) -> int:
    return len(strip_ansi(text))


def pad_ansi(text: str, width: int) -> str:
    """Right-pad ``text`` to ``width`` visible columns."""
    return text + " " * max(0, width - visible_len(text))


def divider(width: int, char: str = "─") -> str:
    return char * width


class Style:
    """!
    @brief ANSI colour and attribute sequences used by the renderer.
    @details Each renderer owns its own instance. With ``enabled`` off (for
    ``--no-color`` or a non-terminal stream) every helper returns plain text.
    """

    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    ITALIC = "\x1b[3m"
    INVERT = "\x1b[7m"

    COLORS = {
        "black": 30,
        "red": 31,
        "green": 32,
        "yellow": 33,
        "blue": 34,
        "magenta": 35,
        "cyan": 36,
        "white": 37,
        "gray": 90,
    }

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def paint(self, text: str, color: str | None = None, *, bold: bool = False, dim: bool = False) -> str:
        if not self.enabled:
            return text
        codes = []
        if bold:
            codes.append("1")
        if dim:
            codes.append("2")
        if color is not None:
            codes.append(str(self.COLORS[color]))
        if not codes:
            return text
        return f"\x1b[{';'.join(codes)}m{text}{self.RESET}"

    def invert(self, text: str) -> str:
        if not self.enabled:
            return text
        return f"{self.INVERT}{self.BOLD}{text}{self.RESET}"


# ---------------------------------------------------------------------------
# Key input handling
# ---------------------------------------------------------------------------

_KEY_TOKENS = {
    "\r": "enter",
    "\n": "enter",
    "\x1b": "escape",
    "\x03": "ctrl_c",
}

_ESCAPE_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[5~": "page_up",
    "\x1b[6~": "page_down",
}


def decode_key(raw: str) -> str:
    """!
    @brief Convert raw key input into a normalized command token.
    @details Arrow, page, Enter, Escape and Ctrl-C map to named tokens; any
    other single printable character is returned unchanged. Unrecognised
    escape sequences decode to an empty string.
    """

    if not raw:
        return ""
    if raw in _KEY_TOKENS:
        return _KEY_TOKENS[raw]
    if raw.startswith("\x1b"):
        return _ESCAPE_SEQUENCES.get(raw, "")
    if len(raw) == 1 and raw.isprintable():
        return raw
    return ""


class RawTerminal:
    """!
    @brief Context manager holding stdin in cbreak mode without echo or signals.
    @details Ctrl-C therefore arrives as ``\\x03`` and is handled as a key. The
    previous terminal attributes are restored on exit, including when the
    loop raises.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdin
        self.fd = self.stream.fileno()
        self._saved: list | None = None

    def __enter__(self) -> "RawTerminal":
        self._saved = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd)
        attrs = termios.tcgetattr(self.fd)
        attrs[3] &= ~(termios.ECHO | termios.ISIG | termios.IEXTEN)
        attrs[0] &= ~(termios.IXON | termios.ICRNL)
        termios.tcsetattr(self.fd, termios.TCSADRAIN, attrs)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def read_key(self, timeout: float | None) -> str:
        """!
        @brief Wait up to ``timeout`` seconds for one key press.
        @returns The raw key including any escape sequence, or ``""`` on timeout.
        """

        ready, _, _ = select.select([self.fd], [], [], timeout)
        if not ready:
            return ""
        first = os.read(self.fd, 1)
        if not first:
            return ""
        if first != b"\x1b":
            return _read_utf8_tail(self.fd, first)
        sequence = first
        while True:
            more, _, _ = select.select([self.fd], [], [], ESCAPE_SEQUENCE_TIMEOUT)
            if not more:
                break
            sequence += os.read(self.fd, 1)
            if len(sequence) >= 3 and (sequence[-1:].isalpha() or sequence.endswith(b"~")):
                break
        return sequence.decode("utf-8", errors="ignore")


def _read_utf8_tail(fd: int, first: bytes) -> str:
    lead = first[0]
    if lead < 0x80:
        return first.decode("ascii", errors="ignore")
    extra = 3 if lead >= 0xF0 else 2 if lead >= 0xE0 else 1
    return (first + os.read(fd, extra)).decode("utf-8", errors="ignore")


# ---------------------------------------------------------------------------
# Progress indicators
# ---------------------------------------------------------------------------


def render_progress_bar(
    current: int,
    total: int,
    width: int = 20,
    fill_char: str = "█",
    empty_char: str = "░",
) -> str:
    """!
    @brief Render a text-based bar for a range value.
    @param current Current value.
    @param total Value at which the bar is full.
    @param width Width of the bar in characters.
    @returns Bracketed bar string.
    """

    ratio = 0.0 if total <= 0 else max(0.0, min(1.0, current / total))
    filled = int(round(ratio * width))
    return f"[{fill_char * filled}{empty_char * (width - filled)}]"


def percentage(current: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(round(current / total * 100))
