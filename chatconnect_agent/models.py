"""Data models for notifications and chat mode access."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class NotificationAction:
    """A button shown on a notification."""
    action: str        # identifier reported back on click, e.g. "open"
    title: str         # button label

    def to_dict(self) -> Dict[str, str]:
        return {"action": self.action, "title": self.title}


@dataclass
class NotificationData:
    """Data carried by a notification and handed back on interaction."""
    url: str = "/dashboard"

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url}


@dataclass
class CanonicalNotification:
    """Fully-defaulted notification record ready to be shown."""
    title: str
    body: str
    icon: str
    badge: str
    tag: str           # notifications sharing a tag replace each other on the surface
    data: NotificationData
    actions: List[NotificationAction] = field(default_factory=list)
    require_interaction: bool = True
    vibrate: tuple = (100, 50, 100)

    def to_options(self) -> Dict[str, Any]:
        """Options mapping for showNotification (everything but the title)."""
        return {
            "body": self.body,
            "icon": self.icon,
            "badge": self.badge,
            "tag": self.tag,
            "vibrate": list(self.vibrate),
            "data": self.data.to_dict(),
            "actions": [a.to_dict() for a in self.actions],
            "requireInteraction": self.require_interaction,
        }


@dataclass
class InteractionEvent:
    """A single user click on a presented notification."""
    action_id: Optional[str]   # None when the notification body itself was clicked
    target_url: str
    tag: str = ""


class NotificationState(Enum):
    DELIVERED = "delivered"
    INTERACTED = "interacted"
    CLOSED = "closed"


class RouteOutcome(Enum):
    """Terminal result of handling one interaction event."""
    DISMISSED = "dismissed"
    FOCUSED = "focused"
    OPENED = "opened"
    UNHANDLED = "unhandled"


@dataclass
class ClientWindow:
    """An open application window as reported by the window manager."""
    id: str
    url: str
    focusable: bool = True


class ChatMode(Enum):
    GENERAL = "general"
    LOVERS = "lovers"


class AuthEvent(Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"


@dataclass(frozen=True)
class AccessState:
    """Snapshot of the mode access controller."""
    mode: ChatMode
    stored_pin: Optional[str]

    @property
    def has_privileged_access(self) -> bool:
        return self.mode is ChatMode.LOVERS
