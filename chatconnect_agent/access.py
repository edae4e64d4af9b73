"""PIN-gated switching between general and lovers chat modes."""

import logging
import sqlite3
from typing import Optional

from .db import delete_meta, get_meta, set_meta
from .models import AccessState, AuthEvent, ChatMode

logger = logging.getLogger(__name__)

MODE_KEY = "chatconnect_mode"
PIN_KEY = "chatconnect_lovers_pin"

MIN_PIN_LENGTH = 4
MAX_PIN_LENGTH = 6


def is_valid_pin(pin: str) -> bool:
    """PIN format accepted by the settings screen: 4-6 digits."""
    return pin.isascii() and pin.isdigit() and MIN_PIN_LENGTH <= len(pin) <= MAX_PIN_LENGTH


class ModeAccessController:
    """
    Tracks the active chat mode and gates lovers mode behind a stored PIN.

    The PIN is durable. The mode is not: every controller starts in general
    mode regardless of what was persisted, and sign-in/sign-out force it back.
    """

    def __init__(self, conn: sqlite3.Connection, scope: str = ""):
        """
        Initialize the controller.

        Args:
            conn: Durable store connection (see db.init_db).
            scope: Origin the stored values belong to.
        """
        self.conn = conn
        self.scope = scope
        self._mode = ChatMode.GENERAL
        self._pin = get_meta(conn, self._key(PIN_KEY))

    def _key(self, name: str) -> str:
        return f"{self.scope}/{name}" if self.scope else name

    @property
    def mode(self) -> ChatMode:
        return self._mode

    @property
    def has_privileged_access(self) -> bool:
        return self._mode is ChatMode.LOVERS

    @property
    def has_pin(self) -> bool:
        return self._pin is not None

    @property
    def state(self) -> AccessState:
        return AccessState(mode=self._mode, stored_pin=self._pin)

    def switch_mode(self, target: ChatMode, pin: Optional[str] = None) -> bool:
        """
        Switch to target mode.

        General mode always succeeds. Lovers mode needs a stored PIN and a
        supplied PIN exactly equal to it; on failure nothing changes.

        Returns:
            True if the switch happened.
        """
        if target is ChatMode.LOVERS:
            if self._pin is None:
                logger.info("Lovers mode refused: no PIN set")
                return False
            if pin is None or pin != self._pin:
                logger.info("Lovers mode refused: incorrect PIN")
                return False

        self._mode = target
        set_meta(self.conn, self._key(MODE_KEY), target.value)
        logger.info(f"Switched to {target.value} mode")
        return True

    def set_pin(self, new_pin: str) -> None:
        """Store or replace the PIN. The current mode is left alone."""
        self._pin = new_pin
        set_meta(self.conn, self._key(PIN_KEY), new_pin)
        logger.info("Lovers mode PIN updated")

    def reset_to_general(self, clear_pin: bool = False) -> None:
        """
        Force general mode and clear the persisted mode marker.

        Args:
            clear_pin: Also delete the stored PIN (used on sign-out).
        """
        self._mode = ChatMode.GENERAL
        delete_meta(self.conn, self._key(MODE_KEY))
        if clear_pin:
            self._pin = None
            delete_meta(self.conn, self._key(PIN_KEY))
        logger.info(f"Access reset to general mode (PIN cleared: {clear_pin})")

    def handle_auth_event(self, event: AuthEvent) -> None:
        if event is AuthEvent.SIGNED_OUT:
            self.reset_to_general(clear_pin=True)
        else:
            self.reset_to_general()
