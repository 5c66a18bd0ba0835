"""User-visible transient notifications."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    """A short message shown to the user and then dismissed."""

    kind: NotificationKind
    title: str
    message: Optional[str] = None


class Notifier(ABC):
    """Sink for notifications raised by domain services."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        pass

    def success(self, title: str, message: Optional[str] = None) -> None:
        self.notify(Notification(NotificationKind.SUCCESS, title, message))

    def error(self, title: str, message: Optional[str] = None) -> None:
        self.notify(Notification(NotificationKind.ERROR, title, message))

    def info(self, title: str, message: Optional[str] = None) -> None:
        self.notify(Notification(NotificationKind.INFO, title, message))


class NullNotifier(Notifier):
    """Discards notifications."""

    def notify(self, notification: Notification) -> None:
        pass

