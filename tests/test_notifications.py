"""!
@brief Tests for the notification service and its expiry timer.
"""
from __future__ import annotations

import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from logicam.notifications import ExpiryTimer, NotificationService, Severity


def test_notification_expires_after_two_seconds(clock) -> None:
    service = NotificationService(clock=clock)
    service.notify("Saved", Severity.SUCCESS)
    assert service.visible

    clock.advance(1.5)
    assert service.tick() is False
    assert service.visible

    clock.advance(0.5)
    assert service.tick() is True
    assert not service.visible
    assert service.state.message == "Saved"
    assert service.state.severity is Severity.SUCCESS
    assert not service.pending


def test_newer_notification_supersedes_and_rearms(clock) -> None:
    service = NotificationService(clock=clock)
    service.notify("first", "info")
    clock.advance(0.5)
    service.notify("second", Severity.ERROR)

    clock.advance(0.5)
    service.tick()
    assert service.visible
    assert service.state.message == "second"

    # The first timer would have fired at 2.0s.
    clock.advance(1.0)
    assert service.tick() is False
    assert service.visible

    clock.advance(0.5)
    assert service.tick() is True
    assert not service.visible


def test_shutdown_cancels_pending_timer(clock) -> None:
    service = NotificationService(clock=clock)
    service.notify("bye")
    service.shutdown()
    assert not service.pending
    clock.advance(5)
    assert service.tick() is False
    assert service.visible


def test_expiry_timer_fires_once() -> None:
    fired: list[int] = []
    timer = ExpiryTimer(1.0, lambda: fired.append(1))
    assert timer.poll(0.5) is False
    assert timer.poll(1.0) is True
    assert timer.poll(2.0) is False
    assert fired == [1]
    assert not timer.active


def test_cancelled_timer_never_fires() -> None:
    fired: list[int] = []
    timer = ExpiryTimer(1.0, lambda: fired.append(1))
    timer.cancel()
    assert timer.poll(10.0) is False
    assert fired == []
