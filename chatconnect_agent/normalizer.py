"""Normalize raw push payloads into a CanonicalNotification."""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from .models import CanonicalNotification, NotificationAction, NotificationData

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "ChatConnect"
DEFAULT_BODY = "You have a new notification"
DEFAULT_ICON = "/favicon.ico"
DEFAULT_BADGE = "/favicon.ico"
DEFAULT_TAG = "friend-request"
DEFAULT_URL = "/dashboard"

RawPayload = Union[None, bytes, str, Dict[str, Any]]


def default_actions() -> List[NotificationAction]:
    return [
        NotificationAction(action="open", title="Open"),
        NotificationAction(action="dismiss", title="Dismiss"),
    ]


def default_notification() -> CanonicalNotification:
    """A notification with every field at its default."""
    return CanonicalNotification(
        title=DEFAULT_TITLE,
        body=DEFAULT_BODY,
        icon=DEFAULT_ICON,
        badge=DEFAULT_BADGE,
        tag=DEFAULT_TAG,
        data=NotificationData(url=DEFAULT_URL),
        actions=default_actions(),
        require_interaction=True,
    )


def _decode(raw: RawPayload) -> Optional[str]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if raw is None:
        return None
    if not isinstance(raw, str):
        raw = str(raw)
    if not raw.strip():
        return None
    return raw


def _parse_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse text as a JSON object; None if it isn't one."""
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _parse_actions(value: Any) -> Optional[List[NotificationAction]]:
    if not isinstance(value, list):
        return None
    actions = []
    for entry in value:
        if (
            isinstance(entry, dict)
            and isinstance(entry.get("action"), str)
            and isinstance(entry.get("title"), str)
        ):
            actions.append(NotificationAction(action=entry["action"], title=entry["title"]))
        else:
            logger.debug(f"Skipping malformed notification action: {entry!r}")
    return actions


def apply_overrides(notification: CanonicalNotification, payload: Dict[str, Any]) -> CanonicalNotification:
    """
    Override defaults with payload fields, one field at a time.

    Title and body accept any string. Icon, badge, tag and data.url accept
    non-empty strings only. Values of the wrong type leave the default in place.
    requireInteraction is never taken from the payload.

    Args:
        notification: The defaulted notification (modified in place).
        payload: Parsed push payload.

    Returns:
        The same notification object.
    """
    title = payload.get("title")
    if isinstance(title, str):
        notification.title = title

    body = payload.get("body")
    if isinstance(body, str):
        notification.body = body

    icon = payload.get("icon")
    if isinstance(icon, str) and icon:
        notification.icon = icon

    badge = payload.get("badge")
    if isinstance(badge, str) and badge:
        notification.badge = badge

    tag = payload.get("tag")
    if isinstance(tag, str) and tag:
        notification.tag = tag

    data = payload.get("data")
    if isinstance(data, dict):
        url = data.get("url")
        if isinstance(url, str) and url:
            notification.data = NotificationData(url=url)

    actions = _parse_actions(payload.get("actions"))
    if actions is not None:
        notification.actions = actions

    return notification


def normalize_payload(raw: RawPayload) -> CanonicalNotification:
    """
    Turn a push payload of unknown shape into a CanonicalNotification.

    Absent or blank payloads give the defaults. A JSON object is merged over
    the defaults field by field. Anything else (plain text, malformed JSON,
    JSON that isn't an object) becomes the body. Never raises.

    Args:
        raw: None, raw bytes, a string, or an already-decoded mapping.

    Returns:
        A notification with every field populated.
    """
    notification = default_notification()

    if isinstance(raw, dict):
        return apply_overrides(notification, raw)

    text = _decode(raw)
    if text is None:
        return notification

    payload = _parse_object(text)
    if payload is None:
        logger.debug("Push payload is not a JSON object; using it as the body")
        notification.body = text
        return notification

    return apply_overrides(notification, payload)
