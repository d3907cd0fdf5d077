"""User notifications emitted by the enrollment controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .ports import INotificationSink

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    SUCCESS = "success"
    DANGER = "danger"


@dataclass(frozen=True)
class Notification:
    """A short message shown to the account owner.

    Attributes:
        title: Headline.
        body: Detail line.
        level: Severity used for styling.
        duration_ms: How long to show it; None keeps it until dismissed.
    """

    title: str
    body: str = ""
    level: NotificationLevel = NotificationLevel.SUCCESS
    duration_ms: int | None = 5000


def activated_notification() -> Notification:
    return Notification(
        title="Two-Factor Authentication activated",
        body="From now on, you will be asked for a code when you log in.",
        level=NotificationLevel.SUCCESS,
    )


def deactivated_notification() -> Notification:
    return Notification(
        title="Two-Factor Authentication deactivated",
        body="You can now log in without a code.",
        level=NotificationLevel.SUCCESS,
    )


def mandatory_notification(message: str) -> Notification:
    """Persistent warning shown when two-factor is required to continue."""
    return Notification(
        title="Two-Factor Authentication mandatory",
        body=message,
        level=NotificationLevel.DANGER,
        duration_ms=None,
    )


class InMemoryNotificationSink(INotificationSink):
    """Collects notifications in a list. Useful for tests."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> None:
        self.sent.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class LoggingNotificationSink(INotificationSink):
    """Writes notifications to a logger instead of showing them."""

    def __init__(self, logger_name: str = "cqrs_ddd.twofactor.notifications") -> None:
        self._logger = logging.getLogger(logger_name)

    async def send(self, notification: Notification) -> None:
        level = (
            logging.WARNING
            if notification.level is NotificationLevel.DANGER
            else logging.INFO
        )
        self._logger.log(
            level,
            "[%s] %s: %s",
            notification.level.value,
            notification.title,
            notification.body,
        )


__all__: list[str] = [
    "NotificationLevel",
    "Notification",
    "activated_notification",
    "deactivated_notification",
    "mandatory_notification",
    "InMemoryNotificationSink",
    "LoggingNotificationSink",
]
