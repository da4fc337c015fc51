"""Transient user-facing messages (toasts)."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

_log = logging.getLogger(__name__)


class Severity(str, enum.Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    severity: Severity
    message: str

    def to_dict(self) -> dict:
        return {"severity": self.severity.value, "message": self.message}


class Notifier:
    """Queues notifications until the UI drains them."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def notify(self, severity: Severity, message: str) -> None:
        if severity is Severity.ERROR:
            _log.warning("Notify %s: %s", severity.value, message)
        else:
            _log.info("Notify %s: %s", severity.value, message)
        self._pending.append(Notification(severity, message))

    def success(self, message: str) -> None:
        self.notify(Severity.SUCCESS, message)

    def info(self, message: str) -> None:
        self.notify(Severity.INFO, message)

    def error(self, message: str) -> None:
        self.notify(Severity.ERROR, message)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Hand over queued notifications; each is delivered once."""
        drained, self._pending = self._pending, []
        return drained
