"""Notification sinks for success/failure messages raised by the editors."""
import logging
from typing import Protocol

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: str | None = None
    is_error: bool = False


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LogNotifier:
    """Writes notifications to the application log."""

    def notify(self, notification: Notification) -> None:
        message = notification.title
        if notification.description:
            message = f"{message}: {notification.description}"
        if notification.is_error:
            logger.warning(f"Notification: {message}")
        else:
            logger.info(f"Notification: {message}")


class CollectingNotifier(LogNotifier):
    """Logs and keeps notifications so a request can return them to the caller."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        super().notify(notification)
        self.notifications.append(notification)

    def last_error(self) -> Notification | None:
        for notification in reversed(self.notifications):
            if notification.is_error:
                return notification
        return None
