"""
One-shot user notifications for command outcomes.

The coordinator emits a Notification per command; how it is shown is up to
the consumer. The default notifier writes it to the structured log.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from slotsync.core.errors import ErrorKind
from slotsync.core.logging import get_logger

logger = get_logger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    message: Optional[str] = None


Notifier = Callable[[Notification], None]

_ERROR_TEXT = {
    ErrorKind.OFFLINE: ("Offline Mode", "This action requires an internet connection."),
    ErrorKind.NETWORK: ("Network Error", "Please check your internet connection."),
    ErrorKind.AUTH: ("Session Expired", "Please log in again."),
    ErrorKind.SERVER: ("Server Error", "Please try again later."),
    ErrorKind.VALIDATION: ("Error", "Please check the details and try again."),
    ErrorKind.UNKNOWN: ("Error", "An unexpected error occurred."),
}


def error_notification(kind: ErrorKind, detail: Optional[str] = None) -> Notification:
    title, message = _ERROR_TEXT[kind]
    if detail and kind in (ErrorKind.VALIDATION, ErrorKind.UNKNOWN):
        message = detail
    return Notification(NotificationLevel.ERROR, title, message)


def success_notification(title: str) -> Notification:
    return Notification(NotificationLevel.SUCCESS, title)


def log_notifier(notification: Notification) -> None:
    log = logger.info if notification.level == NotificationLevel.SUCCESS else logger.warning
    log("notification", level=notification.level.value, title=notification.title, message=notification.message)
