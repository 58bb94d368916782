"""!
@brief Transient, auto-expiring notification slot.
@details There is exactly one notification at a time. :meth:`NotificationService.notify`
replaces it and arms a one-shot :class:`ExpiryTimer`; a newer notification
cancels the previous timer before arming its own. Timers are driven by the
cooperative event loop through :meth:`NotificationService.tick`, so expiry is
processed in arrival order with key presses and never from another thread.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from . import constants


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class NotificationState:
    message: str = ""
    severity: Severity = Severity.INFO
    visible: bool = False


class ExpiryTimer:
    """!
    @brief One-shot deadline handle owned by the notification service.
    @details The handle is released exactly once, either when it fires or when
    it is cancelled; after that :attr:`active` is ``False`` and :meth:`poll`
    never invokes the callback again.
    """

    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self._callback: Callable[[], None] | None = callback

    @property
    def active(self) -> bool:
        return self._callback is not None

    def cancel(self) -> None:
        self._callback = None

    def poll(self, now: float) -> bool:
        """!
        @brief Fire the callback if the deadline has passed.
        @returns ``True`` when the timer fired during this call.
        """

        if self._callback is None or now < self.deadline:
            return False
        callback, self._callback = self._callback, None
        callback()
        return True


class NotificationService:
    """!
    @brief Owner of the single notification slot and its expiry timer.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        duration: float = constants.NOTIFICATION_SECONDS,
    ) -> None:
        self._clock = clock
        self.duration = duration
        self.state = NotificationState()
        self._timer: ExpiryTimer | None = None

    @property
    def visible(self) -> bool:
        return self.state.visible

    @property
    def pending(self) -> bool:
        return self._timer is not None and self._timer.active

    def notify(self, message: str, severity: Severity | str = Severity.INFO) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self.state = NotificationState(message=message, severity=Severity(severity), visible=True)
        self._timer = ExpiryTimer(self._clock() + self.duration, self._expire)

    def _expire(self) -> None:
        self.state.visible = False
        self._timer = None

    def tick(self, now: float | None = None) -> bool:
        """!
        @brief Advance the expiry timer.
        @returns ``True`` when the notification was hidden by this call.
        """

        if self._timer is None:
            return False
        return self._timer.poll(self._clock() if now is None else now)

    def shutdown(self) -> None:
        """!
        @brief Cancel any pending expiry before the process exits.
        """

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


__all__ = ["ExpiryTimer", "NotificationService", "NotificationState", "Severity"]
