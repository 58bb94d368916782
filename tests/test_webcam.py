"""!
@brief Tests for the ``v4l2-ctl`` device backend.
@details The command runner is replaced with a scripted stub so every driver
invocation is observed and no real device is needed.
"""
from __future__ import annotations

import pathlib
import sys
from typing import Callable, List

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from logicam import webcam  # noqa: E402
from logicam.command_runner import CommandResult  # noqa: E402
from logicam.models import DEVICE_BUSY, UNKNOWN, DeviceBackend  # noqa: E402

BUSY_STDERR = "VIDIOC_S_FMT: failed: Device or resource busy"

FMT_OUTPUT = """Format Video Capture:
	Width/Height      : 1280/720
	Pixel Format      : 'MJPG' (Motion-JPEG)
	Field             : None
"""
PARM_OUTPUT = """Streaming Parameters Video Capture:
	Capabilities     : timeperframe
	Frames per second: 24.000 (24/1)
"""


def _result(command, returncode: int = 0, stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(
        command=list(command), returncode=returncode, stdout=stdout, stderr=stderr, duration=0.0
    )


@pytest.fixture
def driver(monkeypatch: pytest.MonkeyPatch):
    """!
    @brief Install a scripted ``run_command`` and expose the recorded commands.
    """

    commands: List[List[str]] = []
    responders: List[Callable[[List[str]], CommandResult | None]] = []

    def fake_run(command, *, event, timeout=None, extra=None):
        command = list(command)
        commands.append(command)
        for responder in responders:
            result = responder(command)
            if result is not None:
                return result
        return _result(command)

    monkeypatch.setattr(webcam.command_runner, "run_command", fake_run)
    return commands, responders


def test_backend_satisfies_protocol() -> None:
    assert isinstance(webcam.V4L2Webcam("/dev/video2"), DeviceBackend)


def test_parse_control_value_variants() -> None:
    assert webcam.parse_control_value("brightness: 140\n") == 140
    assert webcam.parse_control_value("gain=0") == 0
    assert webcam.parse_control_value("garbage") is None
    assert webcam.parse_control_value("brightness: n/a") is None


def test_parse_video_format_reads_both_outputs() -> None:
    fmt = webcam.parse_video_format(FMT_OUTPUT, PARM_OUTPUT)
    assert (fmt.width, fmt.height, fmt.pixel_format, fmt.frame_rate) == (1280, 720, "MJPG", 24.0)


def test_parse_video_format_falls_back_per_field() -> None:
    fmt = webcam.parse_video_format("", "")
    assert (fmt.width, fmt.height, fmt.pixel_format, fmt.frame_rate) == (640, 480, "YUYV", 30.0)


def test_commands_target_the_configured_device(driver) -> None:
    commands, _ = driver
    camera = webcam.V4L2Webcam("/dev/video4")
    camera.set_brightness(130)
    assert commands == [["v4l2-ctl", "-d", "/dev/video4", "--set-ctrl=brightness=130"]]


def test_setters_clamp_to_hardware_range(driver) -> None:
    commands, _ = driver
    camera = webcam.V4L2Webcam()
    camera.set_brightness(400)
    camera.set_exposure_value(0)
    camera.set_white_balance_value(9000)
    assert [command[-1] for command in commands] == [
        "--set-ctrl=brightness=255",
        "--set-ctrl=exposure_time_absolute=3",
        "--set-ctrl=white_balance_temperature=6500",
    ]


def test_auto_flags_use_driver_encodings(driver) -> None:
    commands, _ = driver
    camera = webcam.V4L2Webcam()
    camera.set_auto_exposure(True)
    camera.set_auto_exposure(False)
    camera.set_auto_focus(True)
    camera.set_auto_white_balance(False)
    assert [command[-1] for command in commands] == [
        "--set-ctrl=auto_exposure=3",
        "--set-ctrl=auto_exposure=1",
        "--set-ctrl=focus_automatic_continuous=1",
        "--set-ctrl=white_balance_automatic=0",
    ]


def test_setter_reports_failure(driver) -> None:
    _, responders = driver
    responders.append(lambda command: _result(command, returncode=1, stderr="invalid"))
    assert webcam.V4L2Webcam().set_gain(10) is False


def test_current_settings_parse_and_fall_back(driver) -> None:
    _, responders = driver
    values = {
        "brightness": "brightness: 150",
        "auto_exposure": "auto_exposure: 3",
        "focus_automatic_continuous": "focus_automatic_continuous: 0",
        "white_balance_automatic": "white_balance_automatic: 1",
        "power_line_frequency": "power_line_frequency: 0",
        "gain": "gain: 0",
    }

    def respond(command):
        argument = command[-1]
        if not argument.startswith("--get-ctrl="):
            return None
        name = argument.split("=", 1)[1]
        if name in values:
            return _result(command, stdout=values[name] + "\n")
        return _result(command, returncode=1, stderr="unknown control")

    responders.append(respond)
    settings = webcam.V4L2Webcam().get_current_settings()

    assert settings.brightness == 150
    assert settings.contrast == 128
    assert settings.gain == 0
    assert settings.power_line_frequency == 0
    assert settings.auto_exposure is True
    assert settings.auto_focus is False
    assert settings.auto_white_balance is True
    assert settings.exposure_value == 250
    assert settings.white_balance_value == 4000


def test_current_video_format_uses_fmt_and_parm(driver) -> None:
    _, responders = driver
    responders.append(
        lambda command: _result(command, stdout=FMT_OUTPUT) if command[-1] == "--get-fmt-video" else None
    )
    responders.append(
        lambda command: _result(command, stdout=PARM_OUTPUT) if command[-1] == "--get-parm" else None
    )
    fmt = webcam.V4L2Webcam().get_current_video_format()
    assert fmt.resolution == "1280x720"
    assert fmt.frame_rate_label == "24fps"


@pytest.mark.parametrize(
    ("returncode", "stderr", "expected"),
    [
        (0, "", (True, False, None)),
        (1, BUSY_STDERR, (True, True, None)),
        (1, "Cannot open device /dev/video0: No such file or directory", (False, False, "Device not found")),
        (1, "Permission denied", (False, False, "Unknown error")),
    ],
)
def test_device_status_mapping(driver, returncode, stderr, expected) -> None:
    _, responders = driver
    responders.append(lambda command: _result(command, returncode=returncode, stderr=stderr))
    status = webcam.V4L2Webcam().get_device_status()
    assert (status.available, status.in_use, status.error) == expected


def test_set_video_format_maps_busy_and_unknown(driver) -> None:
    commands, responders = driver
    camera = webcam.V4L2Webcam()

    assert camera.set_video_format(1920, 1080, "MJPG").success
    assert commands[-1][-1] == "--set-fmt-video=width=1920,height=1080,pixelformat=MJPG"

    responders.append(lambda command: _result(command, returncode=1, stderr=BUSY_STDERR))
    assert camera.set_video_format(640, 480, "YUYV").error == DEVICE_BUSY

    responders[:] = [lambda command: _result(command, returncode=1, stderr="Invalid argument")]
    result = camera.set_frame_rate(15)
    assert commands[-1][-1] == "--set-parm=15"
    assert (result.success, result.error) == (False, UNKNOWN)


def test_optimal_profile_runs_every_step_when_busy(driver) -> None:
    commands, responders = driver
    responders.append(
        lambda command: _result(command, returncode=1, stderr=BUSY_STDERR)
        if command[-1].startswith(("--set-fmt-video", "--set-parm"))
        else None
    )

    result = webcam.V4L2Webcam().apply_optimal_settings()

    assert not result.success
    assert result.errors == [
        "Cannot change video format: camera is in use by another application",
        "Cannot change frame rate: camera is in use by another application",
    ]
    arguments = [command[-1] for command in commands]
    assert arguments[0] == "--set-fmt-video=width=1920,height=1080,pixelformat=MJPG"
    assert arguments[1] == "--set-parm=30"
    assert "--set-ctrl=power_line_frequency=2" in arguments
    assert "--set-ctrl=contrast=128" in arguments
    assert len(arguments) == 10


def test_reset_profile_reports_generic_failures(driver) -> None:
    commands, responders = driver
    responders.append(
        lambda command: _result(command, returncode=1, stderr="Invalid argument")
        if command[-1].startswith(("--set-fmt-video", "--set-parm"))
        else None
    )

    result = webcam.V4L2Webcam().reset_to_defaults()

    assert result.errors == ["Failed to reset video format", "Failed to reset frame rate"]
    arguments = [command[-1] for command in commands]
    assert arguments[0] == "--set-fmt-video=width=640,height=480,pixelformat=YUYV"
    assert "--set-ctrl=power_line_frequency=1" in arguments
    assert "--set-ctrl=auto_exposure=1" in arguments
    assert arguments[-1] == "--set-ctrl=backlight_compensation=0"


def test_reset_profile_busy_messages(driver) -> None:
    _, responders = driver
    responders.append(
        lambda command: _result(command, returncode=1, stderr=BUSY_STDERR)
        if command[-1].startswith("--set-fmt-video")
        else None
    )
    result = webcam.V4L2Webcam().reset_to_defaults()
    assert result.errors == ["Cannot reset video format: camera is in use by another application"]


def test_detailed_info_combines_outputs(driver) -> None:
    _, responders = driver
    responders.append(lambda command: _result(command, stdout=command[-1].lstrip("-")))
    info = webcam.V4L2Webcam().get_detailed_info()
    assert info == "Video Format:\nget-fmt-video\nFrame Rate:\nget-parm\nAll Controls:\nlist-ctrls"


def test_detailed_info_unavailable_on_failure(driver) -> None:
    _, responders = driver
    responders.append(
        lambda command: _result(command, returncode=1) if command[-1] == "--list-ctrls" else None
    )
    assert webcam.V4L2Webcam().get_detailed_info() == webcam.DETAILED_INFO_UNAVAILABLE


def test_dependency_and_device_checks(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    node = tmp_path / "video0"
    node.write_text("")
    monkeypatch.setattr(webcam.shutil, "which", lambda name: None)
    camera = webcam.V4L2Webcam(str(node))
    assert camera.check_dependencies() == ["v4l-utils"]
    assert camera.check_device()

    monkeypatch.setattr(webcam.shutil, "which", lambda name: "/usr/bin/v4l2-ctl")
    assert webcam.V4L2Webcam(str(tmp_path / "missing")).check_dependencies() == []
    assert not webcam.V4L2Webcam(str(tmp_path / "missing")).check_device()
