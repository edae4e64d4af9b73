"""Notification surface interface and presentation."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from .models import CanonicalNotification

logger = logging.getLogger(__name__)


class NotificationSurface(ABC):
    """Abstract base class for whatever displays notifications to the user."""

    @abstractmethod
    def show_notification(self, title: str, options: Dict[str, Any]) -> None:
        """
        Display a notification.

        A notification whose options carry the same tag as one already
        visible replaces it.

        Args:
            title: Notification title.
            options: CanonicalNotification.to_options() mapping.
        """
        pass

    @abstractmethod
    def close_notification(self, tag: str) -> None:
        """Remove the notification with this tag, if it is still visible."""
        pass


class LoggingSurface(NotificationSurface):
    """Surface that logs notifications and keeps the visible set in memory."""

    def __init__(self):
        self.visible: Dict[str, Tuple[str, Dict[str, Any]]] = {}

    def show_notification(self, title: str, options: Dict[str, Any]) -> None:
        self.visible[options.get("tag", "")] = (title, options)
        logger.info(f"Showing notification: {title} {json.dumps(options)}")

    def close_notification(self, tag: str) -> None:
        if self.visible.pop(tag, None) is not None:
            logger.info(f"Closed notification with tag '{tag}'")


def present(notification: CanonicalNotification, surface: NotificationSurface) -> bool:
    """
    Show a notification on the surface.

    Failures are logged and not retried.

    Returns:
        True if the surface accepted the notification.
    """
    notification.require_interaction = True
    try:
        surface.show_notification(notification.title, notification.to_options())
        return True
    except Exception as e:
        logger.error(f"Failed to show notification '{notification.tag}': {e}", exc_info=True)
        return False
