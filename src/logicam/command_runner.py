"""!
@brief Shared ``v4l2-ctl`` execution helper.
@details Wraps :func:`subprocess.run` so every driver invocation records
structured telemetry: the planned command, its duration, return code and
captured streams, or the failure that prevented it from running. The webcam
backend routes all of its reads and writes through :func:`run_command`, which
never raises for process-level failures; those are folded into the returned
:class:`CommandResult` so callers can treat them as ordinary values.
"""
from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from typing import Mapping, MutableMapping, Sequence

from . import logging_ext

BUSY_MARKER = "Device or resource busy"
"""!
@brief Substring ``v4l2-ctl`` prints when another process holds the stream.
"""

MISSING_DEVICE_MARKER = "No such file or directory"

DEFAULT_TIMEOUT = 5.0


@dataclass
class CommandResult:
    """!
    @brief Outcome metadata returned by :func:`run_command`.
    @details ``timed_out`` is ``True`` when the command exceeded the requested
    timeout; ``error`` carries the exception text when the process could not be
    started at all.
    """

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str
    duration: float
    timed_out: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and self.error is None

    @property
    def busy(self) -> bool:
        """!
        @brief ``True`` when the failure was caused by exclusive access elsewhere.
        """

        return not self.ok and BUSY_MARKER in self._diagnostic_text()

    @property
    def device_missing(self) -> bool:
        return not self.ok and MISSING_DEVICE_MARKER in self._diagnostic_text()

    def _diagnostic_text(self) -> str:
        return f"{self.stderr}\n{self.error or ''}"


def run_command(
    command: Sequence[str],
    *,
    event: str,
    timeout: int | float | None = DEFAULT_TIMEOUT,
    extra: Mapping[str, object] | None = None,
) -> CommandResult:
    """!
    @brief Execute ``command`` while emitting structured telemetry records.
    @details Logs a ``*_plan`` event prior to invocation and a ``*_result``
    event once the process exits, or a ``*_missing``/``*_timeout``/``*_error``
    record when it could not complete.
    @param command Command sequence to execute.
    @param event Base event identifier recorded in machine logs.
    @param timeout Optional timeout in seconds for the subprocess.
    @param extra Mapping merged into machine log ``extra`` payloads.
    @returns :class:`CommandResult` describing the observed outcome.
    """

    human_logger = logging_ext.get_human_logger()
    machine_logger = logging_ext.get_machine_logger()

    command_list = [str(part) for part in command]
    metadata: MutableMapping[str, object] = {"event": f"{event}_plan", "command": command_list}
    if extra:
        metadata.update(extra)
    machine_logger.debug(f"{event}_plan", extra=dict(metadata))

    start = time.monotonic()
    try:
        completed = subprocess.run(  # noqa: S603 - argument list, no shell
            command_list,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        duration = time.monotonic() - start
        human_logger.error("Command not found: %s", command_list[0])
        failure_meta: MutableMapping[str, object] = {
            "event": f"{event}_missing",
            "command": command_list,
            "duration": duration,
            "error": str(exc),
        }
        if extra:
            failure_meta.update(extra)
        machine_logger.error(f"{event}_missing", extra=dict(failure_meta))
        return CommandResult(
            command=command_list,
            returncode=127,
            stdout="",
            stderr="",
            duration=duration,
            error=str(exc),
        )
    except subprocess.TimeoutExpired as exc:
        duration = time.monotonic() - start
        human_logger.error("Command timed out after %.1fs: %s", duration, " ".join(command_list))
        stdout = _as_text(exc.stdout)
        stderr = _as_text(exc.stderr)
        failure_meta = {
            "event": f"{event}_timeout",
            "command": command_list,
            "duration": duration,
            "stdout": stdout,
            "stderr": stderr,
        }
        if extra:
            failure_meta.update(extra)
        machine_logger.error(f"{event}_timeout", extra=dict(failure_meta))
        return CommandResult(
            command=command_list,
            returncode=1,
            stdout=stdout,
            stderr=stderr,
            duration=duration,
            timed_out=True,
            error="timeout",
        )
    except OSError as exc:
        duration = time.monotonic() - start
        human_logger.error("Failed to execute %s: %s", command_list[0], exc)
        failure_meta = {
            "event": f"{event}_error",
            "command": command_list,
            "duration": duration,
            "error": str(exc),
        }
        if extra:
            failure_meta.update(extra)
        machine_logger.error(f"{event}_error", extra=dict(failure_meta))
        return CommandResult(
            command=command_list,
            returncode=1,
            stdout="",
            stderr="",
            duration=duration,
            error=str(exc),
        )

    duration = time.monotonic() - start
    result_meta: MutableMapping[str, object] = {
        "event": f"{event}_result",
        "command": command_list,
        "return_code": completed.returncode,
        "stdout": completed.stdout,
        "stderr": completed.stderr,
        "duration": duration,
    }
    if extra:
        result_meta.update(extra)
    machine_logger.info(f"{event}_result", extra=dict(result_meta))

    if completed.returncode != 0:
        first_line = (completed.stderr or "").strip().splitlines()[:1]
        human_logger.warning(
            "%s exited with %s%s",
            " ".join(command_list[1:]) or command_list[0],
            completed.returncode,
            f": {first_line[0]}" if first_line else "",
        )

    return CommandResult(
        command=command_list,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
        duration=duration,
    )


def _as_text(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream
