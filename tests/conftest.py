"""
Shared fixtures for the ChatConnect agent test suite.

Collaborators (notification surface, window manager) are MagicMocks built
against the abstract interfaces, so tests can assert on call order without a
real windowing environment. The durable store is an in-memory sqlite db.
"""

from unittest.mock import MagicMock

import pytest

from chatconnect_agent.access import ModeAccessController
from chatconnect_agent.agent import NotificationDeliveryAgent
from chatconnect_agent.db import init_db
from chatconnect_agent.models import ClientWindow
from chatconnect_agent.presenter import NotificationSurface
from chatconnect_agent.router import WindowManager

ORIGIN = "https://chatconnect.test"


def make_window_manager(windows=None):
    """Mock WindowManager whose enumerate_windows returns the given windows."""
    manager = MagicMock(spec=WindowManager)
    manager.enumerate_windows.return_value = list(windows or [])
    return manager


def app_window(window_id="w1", path="/chat", focusable=True):
    return ClientWindow(id=window_id, url=f"{ORIGIN}{path}", focusable=focusable)


@pytest.fixture
def conn():
    connection = init_db(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def controller(conn):
    return ModeAccessController(conn, scope=ORIGIN)


@pytest.fixture
def surface():
    return MagicMock(spec=NotificationSurface)


@pytest.fixture
def windows():
    return make_window_manager()


@pytest.fixture
def agent(surface, windows):
    return NotificationDeliveryAgent(surface, windows, ORIGIN)
