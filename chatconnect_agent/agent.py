"""Background notification delivery agent."""

import logging
from typing import Any, Dict, Optional

from .models import CanonicalNotification, InteractionEvent, NotificationState, RouteOutcome
from .normalizer import DEFAULT_URL, RawPayload, normalize_payload
from .presenter import NotificationSurface, present
from .router import WindowManager, route_interaction

logger = logging.getLogger(__name__)


class NotificationDeliveryAgent:
    """
    Receives push events, shows them, and routes clicks back to a window.

    Each call is handled to completion. Nothing here is retried: the push
    transport owns redelivery.
    """

    def __init__(self, surface: NotificationSurface, windows: WindowManager, origin: str):
        """
        Initialize the agent.

        Args:
            surface: Where notifications are shown.
            windows: Window manager for the application's open windows.
            origin: Application origin, e.g. "https://chatconnect.app".
        """
        self.surface = surface
        self.windows = windows
        self.origin = origin
        self._states: Dict[str, NotificationState] = {}

    def state_of(self, tag: str) -> Optional[NotificationState]:
        return self._states.get(tag)

    def handle_push(self, raw: RawPayload) -> CanonicalNotification:
        """
        Normalize and present one push message. Never raises.

        Args:
            raw: The push payload, possibly absent, JSON, or plain text.

        Returns:
            The notification that was handed to the surface.
        """
        logger.info("Push event received")
        notification = normalize_payload(raw)
        if present(notification, self.surface):
            self._transition(notification.tag, NotificationState.DELIVERED)
        return notification

    def handle_click(
        self,
        action_id: Optional[str],
        notification_data: Optional[Dict[str, Any]] = None,
        tag: str = "",
    ) -> RouteOutcome:
        """
        Handle a click on a presented notification.

        The notification is closed first, whatever happens next.

        Args:
            action_id: The action button clicked, or None for the body.
            notification_data: The notification's data mapping.
            tag: The notification's tag.

        Returns:
            The terminal outcome for this click.
        """
        url = _target_url(notification_data)
        tag = tag if isinstance(tag, str) else str(tag)
        if action_id is not None and not isinstance(action_id, str):
            action_id = str(action_id)
        event = InteractionEvent(action_id=action_id, target_url=url, tag=tag)
        logger.info(f"Notification clicked: tag='{tag}' action={action_id!r} url={url}")

        self._transition(tag, NotificationState.INTERACTED)
        try:
            self.surface.close_notification(tag)
        except Exception as e:
            logger.warning(f"Could not close notification '{tag}': {e}")
        self._transition(tag, NotificationState.CLOSED)

        outcome = route_interaction(event, self.windows, self.origin)
        logger.info(f"Click on '{tag}' resolved: {outcome.value}")
        return outcome

    def handle_close(self, tag: str) -> None:
        """Record a notification closed without interaction."""
        tag = tag if isinstance(tag, str) else str(tag)
        logger.info(f"Notification closed: tag='{tag}'")
        self._transition(tag, NotificationState.CLOSED)

    def _transition(self, tag: str, state: NotificationState) -> None:
        previous = self._states.get(tag)
        self._states[tag] = state
        logger.debug(
            f"Notification '{tag}': {previous.value if previous else 'unknown'} -> {state.value}"
        )


def _target_url(notification_data: Any) -> str:
    """The click target from a notification's data, or the dashboard."""
    if isinstance(notification_data, dict):
        url = notification_data.get("url")
        if isinstance(url, str) and url:
            return url
    return DEFAULT_URL
