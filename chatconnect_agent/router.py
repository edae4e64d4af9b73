"""Resolve notification clicks to a window action."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import urljoin

from .models import ClientWindow, InteractionEvent, RouteOutcome

logger = logging.getLogger(__name__)

DISMISS_ACTION = "dismiss"


class WindowManager(ABC):
    """Abstract base class for the collaborator that controls application windows."""

    @abstractmethod
    def enumerate_windows(self, origin: str) -> List[ClientWindow]:
        """Return the currently open windows belonging to origin."""
        pass

    @abstractmethod
    def navigate(self, window: ClientWindow, url: str) -> None:
        pass

    @abstractmethod
    def focus(self, window: ClientWindow) -> None:
        pass

    @abstractmethod
    def open_window(self, url: str) -> Optional[ClientWindow]:
        """Open a new window or tab at url."""
        pass


class StaticWindowManager(WindowManager):
    """
    In-memory window manager over a fixed list of windows.

    Relative URLs are resolved against the window being navigated, or against
    origin for new windows, so windows keep matching the application origin.
    """

    def __init__(self, windows: Optional[List[ClientWindow]] = None, origin: str = ""):
        self.windows = list(windows or [])
        self.origin = origin
        self.focused: Optional[ClientWindow] = None

    def enumerate_windows(self, origin: str) -> List[ClientWindow]:
        return [w for w in self.windows if origin in w.url]

    def navigate(self, window: ClientWindow, url: str) -> None:
        logger.info(f"Navigating window {window.id} to {url}")
        window.url = urljoin(window.url, url)

    def focus(self, window: ClientWindow) -> None:
        logger.info(f"Focusing window {window.id}")
        self.focused = window

    def open_window(self, url: str) -> Optional[ClientWindow]:
        url = urljoin(self.origin, url) if self.origin else url
        window = ClientWindow(id=f"window-{len(self.windows) + 1}", url=url)
        self.windows.append(window)
        self.focused = window
        logger.info(f"Opened window {window.id} at {url}")
        return window


def _find_target(windows: List[ClientWindow], origin: str) -> Optional[ClientWindow]:
    for window in windows:
        if origin in window.url and window.focusable:
            return window
    return None


def route_interaction(event: InteractionEvent, windows: WindowManager, origin: str) -> RouteOutcome:
    """
    Act on a notification click.

    A dismiss action does nothing. Otherwise the first open, focusable window
    of the origin is navigated to the target URL and then focused; no other
    window is touched. With no usable window, a new one is opened.

    Args:
        event: The click being handled.
        windows: Window manager collaborator.
        origin: Application origin used to match windows.

    Returns:
        The terminal outcome for this event.
    """
    if event.action_id == DISMISS_ACTION:
        return RouteOutcome.DISMISSED

    try:
        candidates = windows.enumerate_windows(origin)
    except Exception as e:
        logger.warning(f"Could not enumerate open windows: {e}")
        candidates = []

    target = _find_target(candidates, origin)
    if target is not None:
        try:
            windows.navigate(target, event.target_url)
            windows.focus(target)
            return RouteOutcome.FOCUSED
        except Exception as e:
            logger.warning(f"Could not focus window {target.id}, opening a new one: {e}")

    try:
        windows.open_window(event.target_url)
        return RouteOutcome.OPENED
    except Exception as e:
        logger.error(f"Could not open a window at {event.target_url}: {e}", exc_info=True)
        return RouteOutcome.UNHANDLED
