"""Tests for chatconnect_agent.access."""

import pytest

from chatconnect_agent.access import MODE_KEY, PIN_KEY, ModeAccessController, is_valid_pin
from chatconnect_agent.db import get_meta, set_meta
from chatconnect_agent.models import AuthEvent, ChatMode

from .conftest import ORIGIN


def _assert_general(controller):
    assert controller.mode is ChatMode.GENERAL
    assert controller.has_privileged_access is False
    assert controller.state.has_privileged_access is False


class TestSwitchMode:
    def test_starts_in_general_mode(self, controller):
        _assert_general(controller)
        assert controller.has_pin is False

    def test_lovers_refused_without_stored_pin(self, controller, conn):
        assert controller.switch_mode(ChatMode.LOVERS, "1234") is False

        _assert_general(controller)
        assert get_meta(conn, f"{ORIGIN}/{MODE_KEY}") is None

    @pytest.mark.parametrize("pin", [None, "", "4321", "1234 ", "01234"])
    def test_lovers_refused_with_wrong_pin(self, controller, pin):
        controller.set_pin("1234")

        assert controller.switch_mode(ChatMode.LOVERS, pin) is False
        _assert_general(controller)

    def test_lovers_granted_with_exact_pin(self, controller, conn):
        controller.set_pin("1234")

        assert controller.switch_mode(ChatMode.LOVERS, "1234") is True
        assert controller.mode is ChatMode.LOVERS
        assert controller.has_privileged_access is True
        assert get_meta(conn, f"{ORIGIN}/{MODE_KEY}") == "lovers"

    def test_general_always_succeeds(self, controller, conn):
        controller.set_pin("1234")
        controller.switch_mode(ChatMode.LOVERS, "1234")

        assert controller.switch_mode(ChatMode.GENERAL) is True
        _assert_general(controller)
        assert get_meta(conn, f"{ORIGIN}/{MODE_KEY}") == "general"

    def test_failed_switch_keeps_lovers_mode(self, controller):
        controller.set_pin("1234")
        controller.switch_mode(ChatMode.LOVERS, "1234")

        assert controller.switch_mode(ChatMode.LOVERS, "0000") is False
        assert controller.mode is ChatMode.LOVERS


class TestSetPin:
    def test_set_pin_does_not_change_mode(self, controller):
        controller.set_pin("1234")

        _assert_general(controller)
        assert controller.state.stored_pin == "1234"

    def test_replacing_pin_invalidates_old_one(self, controller):
        controller.set_pin("1234")
        controller.set_pin("5678")

        assert controller.switch_mode(ChatMode.LOVERS, "1234") is False
        assert controller.switch_mode(ChatMode.LOVERS, "5678") is True

    @pytest.mark.parametrize("pin,valid", [("123", False), ("1234", True), ("123456", True), ("1234567", False), ("abcd", False), ("12 4", False), ("\u0661\u0662\u0663\u0664", False)])
    def test_pin_format(self, pin, valid):
        assert is_valid_pin(pin) is valid


class TestDurability:
    def test_pin_survives_restart_but_mode_does_not(self, conn):
        first = ModeAccessController(conn, scope=ORIGIN)
        first.set_pin("1234")
        first.switch_mode(ChatMode.LOVERS, "1234")

        restarted = ModeAccessController(conn, scope=ORIGIN)

        _assert_general(restarted)
        assert restarted.has_pin is True
        assert restarted.switch_mode(ChatMode.LOVERS, "1234") is True

    def test_persisted_lovers_marker_is_ignored_on_start(self, conn):
        set_meta(conn, f"{ORIGIN}/{PIN_KEY}", "1234")
        set_meta(conn, f"{ORIGIN}/{MODE_KEY}", "lovers")

        _assert_general(ModeAccessController(conn, scope=ORIGIN))

    def test_scopes_are_independent(self, conn):
        ModeAccessController(conn, scope=ORIGIN).set_pin("1234")

        other = ModeAccessController(conn, scope="https://other.test")

        assert other.has_pin is False


class TestAuthEvents:
    def test_sign_out_resets_mode_and_clears_pin(self, controller, conn):
        controller.set_pin("1234")
        controller.switch_mode(ChatMode.LOVERS, "1234")

        controller.handle_auth_event(AuthEvent.SIGNED_OUT)

        _assert_general(controller)
        assert controller.state.stored_pin is None
        assert get_meta(conn, f"{ORIGIN}/{PIN_KEY}") is None
        assert get_meta(conn, f"{ORIGIN}/{MODE_KEY}") is None
        assert controller.switch_mode(ChatMode.LOVERS, "1234") is False

    def test_sign_out_clears_pin_for_later_sessions(self, conn, controller):
        controller.set_pin("1234")
        controller.handle_auth_event(AuthEvent.SIGNED_OUT)

        assert ModeAccessController(conn, scope=ORIGIN).has_pin is False

    def test_sign_in_drops_lovers_mode_but_keeps_pin(self, controller, conn):
        controller.set_pin("1234")
        controller.switch_mode(ChatMode.LOVERS, "1234")

        controller.handle_auth_event(AuthEvent.SIGNED_IN)

        _assert_general(controller)
        assert controller.has_pin is True
        assert get_meta(conn, f"{ORIGIN}/{MODE_KEY}") is None
        assert controller.switch_mode(ChatMode.LOVERS, "1234") is True
