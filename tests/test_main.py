"""Integration tests for the CLI entry point."""
from __future__ import annotations

import logging
import pathlib
import sys
from typing import List

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from logicam import logging_ext, main  # noqa: E402
from logicam.models import CompositeResult  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_logging_state() -> None:
    yield
    for name in (logging_ext.HUMAN_LOGGER_NAME, logging_ext.MACHINE_LOGGER_NAME):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


@pytest.fixture
def camera(monkeypatch, fake_backend_cls):
    """!
    @brief Replace the ``v4l2-ctl`` backend with a recording fake.
    """

    class _Camera(fake_backend_cls):
        missing: List[str] = []
        present = True

        def __init__(self, device, *, timeout=None):
            super().__init__()
            self.device = device
            self.timeout = timeout

        def check_dependencies(self):
            return list(self.missing)

        def check_device(self):
            return self.present

    created: List[_Camera] = []

    def factory(device, *, timeout=None):
        instance = _Camera(device, timeout=timeout)
        created.append(instance)
        return instance

    monkeypatch.setattr(main, "V4L2Webcam", factory)
    return _Camera, created


def _run(tmp_path, *argv: str) -> int:
    return main.main(["--logdir", str(tmp_path / "logs"), *argv])


def test_parser_defaults(monkeypatch) -> None:
    monkeypatch.delenv("LOGICAM_DEVICE", raising=False)
    args = main.build_arg_parser().parse_args([])
    assert args.device == "/dev/video0"
    assert args.tui_refresh == 100
    assert args.command_timeout == 5.0
    assert not (args.info or args.status or args.optimize or args.reset)


def test_device_can_come_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("LOGICAM_DEVICE", "/dev/video3")
    assert main.build_arg_parser().parse_args([]).device == "/dev/video3"


def test_modes_are_mutually_exclusive() -> None:
    with pytest.raises(SystemExit):
        main.build_arg_parser().parse_args(["--optimize", "--reset"])


def test_log_directory_follows_xdg_state_home(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))
    assert main._resolve_log_directory(None) == (tmp_path / "logicam").resolve()


def test_missing_dependency_exits_with_install_hint(tmp_path, camera, capsys) -> None:
    camera_cls, _ = camera
    camera_cls.missing = ["v4l-utils"]

    assert _run(tmp_path, "--status") == 1

    err = capsys.readouterr().err
    assert "Missing dependencies: v4l-utils" in err
    assert "Please install: sudo apt install v4l-utils" in err


def test_missing_device_exits(tmp_path, camera, capsys) -> None:
    camera_cls, _ = camera
    camera_cls.present = False

    assert _run(tmp_path, "--device", "/dev/video9", "--info") == 1
    assert "webcam not found at /dev/video9" in capsys.readouterr().err


def test_info_mode_prints_details(tmp_path, camera, capsys) -> None:
    _, created = camera
    assert _run(tmp_path, "--info", "--command-timeout", "2.5") == 0
    assert "Video Format:" in capsys.readouterr().out
    assert created[0].timeout == 2.5


def test_status_mode_prints_summary(tmp_path, camera, capsys) -> None:
    assert _run(tmp_path, "--status") == 0
    out = capsys.readouterr().out
    assert "Available" in out
    assert "640x480 YUYV @ 30fps" in out
    assert f"Logs:          {(tmp_path / 'logs').resolve()}" in out


def test_optimize_mode_reports_partial_failure(tmp_path, camera, capsys, monkeypatch) -> None:
    camera_cls, created = camera
    monkeypatch.setattr(
        camera_cls,
        "apply_optimal_settings",
        lambda self: CompositeResult(success=False, errors=["Failed to set frame rate"]),
    )

    assert _run(tmp_path, "--optimize") == 1
    err = capsys.readouterr().err
    assert "Failed to apply optimal settings" in err
    assert "Failed to set frame rate" in err


def test_reset_mode_with_yes_skips_prompt(tmp_path, camera, capsys) -> None:
    _, created = camera
    assert _run(tmp_path, "--reset", "--yes") == 0
    assert created[0].calls == [("reset_to_defaults",)]
    assert "Factory defaults restored successfully!" in capsys.readouterr().out


def test_reset_mode_declined(tmp_path, camera, monkeypatch) -> None:
    _, created = camera
    monkeypatch.setattr(main.confirm, "request_reset_confirmation", lambda force: False)
    assert _run(tmp_path, "--reset") == 0
    assert created[0].calls == []


def test_interactive_requires_terminal(tmp_path, camera, monkeypatch, capsys) -> None:
    monkeypatch.setattr(main.sys, "stdin", _Tty(interactive=False))
    launched: List[object] = []
    monkeypatch.setattr(main.tui, "run_tui", lambda state: launched.append(state))

    assert _run(tmp_path) == 1
    assert launched == []
    assert "requires a terminal" in capsys.readouterr().err


def test_interactive_launches_tui(tmp_path, camera, monkeypatch) -> None:
    monkeypatch.delenv("LOGICAM_DEVICE", raising=False)
    monkeypatch.setattr(main.sys, "stdin", _Tty())
    monkeypatch.setattr(main.sys, "stdout", _Tty())
    launched: List[dict] = []
    monkeypatch.setattr(main.tui, "run_tui", lambda state: launched.append(dict(state)))

    assert _run(tmp_path, "--tui-refresh", "40") == 0

    state = launched[0]
    assert state["args"].tui_refresh == 40
    assert state["backend"].device == "/dev/video0"
    assert state["human_logger"].name == "logicam.human"


class _Tty:
    def __init__(self, interactive: bool = True) -> None:
        self.interactive = interactive

    def isatty(self) -> bool:
        return self.interactive

    def write(self, text: str) -> int:
        return len(text)

    def flush(self) -> None:
        return None
