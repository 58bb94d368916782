"""!
@brief Primary entry point for the LogiCam Control CLI.
@details This module bootstraps the runtime: argument parsing for the
interactive and one-shot modes, logging setup, the ``v4l2-ctl`` and device
presence checks, and finally either the interactive TUI or a single
non-interactive operation.
"""
from __future__ import annotations

import argparse
import logging
import os
import pathlib
import sys
from typing import Iterable, Optional

from . import command_runner, confirm, constants, logging_ext, tui, version
from .app_state import AppState
from .models import DeviceBackend
from .webcam import V4L2Webcam


def build_arg_parser() -> argparse.ArgumentParser:
    """!
    @brief Create the top-level argument parser.
    @details Without a mode flag the interactive TUI starts; the one-shot
    modes are mutually exclusive.
    """

    parser = argparse.ArgumentParser(
        prog="logicam",
        description=f"{constants.DEVICE_MODEL} webcam controller built on v4l2-ctl.",
        add_help=True,
    )
    metadata = version.build_info()
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"{metadata['version']} ({metadata['build']})",
    )
    parser.add_argument(
        "-d",
        "--device",
        metavar="PATH",
        default=os.environ.get(constants.DEVICE_ENV_VAR, constants.DEFAULT_DEVICE),
        help=f"Video device node (default: {constants.DEFAULT_DEVICE} or ${constants.DEVICE_ENV_VAR}).",
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--info", action="store_true", help="Print detailed camera information and exit.")
    modes.add_argument("--status", action="store_true", help="Print device status and current settings.")
    modes.add_argument("--optimize", action="store_true", help="Apply the optimal quality profile and exit.")
    modes.add_argument("--reset", action="store_true", help="Reset all settings to factory defaults and exit.")

    parser.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt for --reset.")
    parser.add_argument("--logdir", metavar="DIR", help="Directory for human/JSONL log output.")
    parser.add_argument("--quiet", action="store_true", help="Only record errors in the human log.")
    parser.add_argument("--json", action="store_true", help="Mirror structured events to stderr.")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI color codes.")
    parser.add_argument(
        "--tui-refresh",
        metavar="MS",
        type=int,
        default=constants.DEFAULT_REFRESH_MS,
        help="Key polling interval for the TUI in milliseconds.",
    )
    parser.add_argument(
        "--command-timeout",
        metavar="SEC",
        type=float,
        default=command_runner.DEFAULT_TIMEOUT,
        help="Timeout in seconds for each v4l2-ctl invocation.",
    )
    return parser


def _default_log_directory() -> pathlib.Path:
    state_home = os.environ.get("XDG_STATE_HOME")
    base = pathlib.Path(state_home) if state_home else pathlib.Path.home() / ".local" / "state"
    return base / "logicam"


def _resolve_log_directory(candidate: Optional[str]) -> pathlib.Path:
    """!
    @brief Determine the log directory, falling back to the XDG state directory.
    """

    if candidate:
        return pathlib.Path(candidate).expanduser().resolve()
    expanded = _default_log_directory().expanduser()
    try:
        return expanded.resolve()
    except OSError:
        return expanded


def _bootstrap_logging(args: argparse.Namespace) -> tuple[logging.Logger, logging.Logger]:
    """!
    @brief Initialize human and machine loggers using :mod:`logging_ext` helpers.
    @returns A tuple of configured human and machine loggers.
    """

    logdir = _resolve_log_directory(getattr(args, "logdir", None))
    setattr(args, "logdir", str(logdir))
    human_logger, machine_logger = logging_ext.setup_logging(
        logdir,
        json_to_stream=getattr(args, "json", False),
        device=getattr(args, "device", None),
    )
    if getattr(args, "quiet", False):
        human_logger.setLevel(logging.ERROR)
    return human_logger, machine_logger


def _determine_mode(args: argparse.Namespace) -> str:
    for mode in ("info", "status", "optimize", "reset"):
        if getattr(args, mode, False):
            return mode
    return "interactive"


def _fail(human_log: logging.Logger, *lines: str) -> int:
    for line in lines:
        print(line, file=sys.stderr)
    human_log.error(" ".join(lines))
    return 1


def _check_environment(webcam: V4L2Webcam, human_log: logging.Logger) -> int:
    """!
    @brief Verify ``v4l2-ctl`` is installed and the device node exists.
    @returns ``0`` when ready, otherwise the exit code to return.
    """

    missing = webcam.check_dependencies()
    if missing:
        return _fail(
            human_log,
            f"Missing dependencies: {', '.join(missing)}",
            f"Please install: sudo apt install {' '.join(missing)}",
        )
    if not webcam.check_device():
        return _fail(
            human_log,
            f"{constants.DEVICE_MODEL} webcam not found at {webcam.device}",
            "Please ensure your webcam is connected.",
        )
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    """!
    @brief Entry point invoked by the ``logicam`` console script.
    @returns Process exit code integer.
    """

    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    human_log, machine_log = _bootstrap_logging(args)

    mode = _determine_mode(args)
    machine_log.info(
        "startup",
        extra={"event": "startup", "data": {"mode": mode, "device": args.device}},
    )

    webcam = V4L2Webcam(args.device, timeout=args.command_timeout)
    status = _check_environment(webcam, human_log)
    if status:
        return status

    try:
        if mode == "interactive":
            return _run_interactive(args, webcam, human_log, machine_log)
        return _run_one_shot(mode, args, webcam, human_log)
    except KeyboardInterrupt:
        human_log.info("Interrupted by user.")
        return 130


def _run_interactive(
    args: argparse.Namespace,
    backend: DeviceBackend,
    human_log: logging.Logger,
    machine_log: logging.Logger,
) -> int:
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        return _fail(
            human_log,
            "Interactive mode requires a terminal.",
            "Use --status, --info, --optimize or --reset for scripted use.",
        )
    app_state: AppState = {
        "args": args,
        "human_logger": human_log,
        "machine_logger": machine_log,
        "backend": backend,
    }
    print("Starting LogiCam Control...")
    tui.run_tui(app_state)
    return 0


def _run_one_shot(
    mode: str, args: argparse.Namespace, backend: DeviceBackend, human_log: logging.Logger
) -> int:
    if mode == "info":
        print(backend.get_detailed_info())
        return 0
    if mode == "status":
        return _print_status(backend)

    if mode == "reset":
        if not confirm.request_reset_confirmation(force=bool(getattr(args, "yes", False))):
            print("Reset cancelled.")
            human_log.info("Reset cancelled at the confirmation prompt.")
            return 0
        result = backend.reset_to_defaults()
        success, failure = "Factory defaults restored successfully!", "Failed to reset to defaults"
    else:
        result = backend.apply_optimal_settings()
        success, failure = "Optimal settings applied successfully!", "Failed to apply optimal settings"

    if result.success:
        print(success)
        human_log.info(success)
        return 0
    return _fail(human_log, failure, *result.errors)


def _print_status(backend: DeviceBackend) -> int:
    status = backend.get_device_status()
    fmt = backend.get_current_video_format()
    settings = backend.get_current_settings()
    if status.in_use:
        label = "IN USE"
    elif status.available:
        label = "Available"
    else:
        label = f"Unavailable ({status.error})"
    print(f"Status:       {label}")
    print(f"Format:       {fmt.resolution} {fmt.pixel_format} @ {fmt.frame_rate_label}")
    print(f"Brightness:   {settings.brightness}/255")
    print(f"Contrast:     {settings.contrast}/255")
    print(f"Saturation:   {settings.saturation}/255")
    print(f"Sharpness:    {settings.sharpness}/255")
    print(f"Gain:         {settings.gain}/255")
    print(f"Auto Exposure: {'ON' if settings.auto_exposure else 'OFF'}")
    print(f"Auto Focus:    {'ON' if settings.auto_focus else 'OFF'}")
    print(f"Auto WB:       {'ON' if settings.auto_white_balance else 'OFF'}")
    logdir = logging_ext.get_log_directory()
    if logdir is not None:
        print(f"Logs:          {logdir}")
    return 0 if status.available else 1


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    sys.exit(main())
