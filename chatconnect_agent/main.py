"""Main entry point for the ChatConnect notification agent and mode controller."""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Iterable, List, Optional, TextIO

from .access import ModeAccessController, is_valid_pin
from .agent import NotificationDeliveryAgent
from .config import load_config
from .db import init_db
from .models import AuthEvent, ChatMode, ClientWindow
from .presenter import LoggingSurface
from .router import StaticWindowManager

# Configure logging (stderr: stdout carries command output)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)]
)
logger = logging.getLogger(__name__)


def _windows_from_urls(urls: Optional[List[str]], origin: str) -> StaticWindowManager:
    return StaticWindowManager([
        ClientWindow(id=f"window-{i}", url=url) for i, url in enumerate(urls or [], start=1)
    ], origin=origin)


def dispatch_event(
    event: Dict[str, Any],
    agent: NotificationDeliveryAgent,
    controller: ModeAccessController,
) -> Dict[str, Any]:
    """
    Handle one event from the serve loop.

    Supported types: push, click, close, auth, switch_mode, set_pin, status.

    Raises:
        ValueError: If the event type or one of its fields is not recognized.
    """
    event_type = event.get("type")

    if event_type == "push":
        notification = agent.handle_push(event.get("payload"))
        return {"title": notification.title, **notification.to_options()}

    if event_type == "click":
        action = event.get("action")
        if action is not None and not isinstance(action, str):
            raise ValueError("action must be a string")
        outcome = agent.handle_click(action, event.get("data"), _tag(event))
        return {"outcome": outcome.value}

    if event_type == "close":
        tag = _tag(event)
        agent.handle_close(tag)
        return {"closed": tag}

    if event_type == "auth":
        controller.handle_auth_event(AuthEvent(event.get("event")))
        return _status(controller)

    if event_type == "switch_mode":
        ok = controller.switch_mode(ChatMode(event.get("mode")), event.get("pin"))
        return {"success": ok, **_status(controller)}

    if event_type == "set_pin":
        pin = event.get("pin")
        if not isinstance(pin, str) or not is_valid_pin(pin):
            raise ValueError("PIN must be 4-6 digits long")
        controller.set_pin(pin)
        return _status(controller)

    if event_type == "status":
        return _status(controller)

    raise ValueError(f"Unknown event type: {event_type!r}")


def _tag(event: Dict[str, Any]) -> str:
    tag = event.get("tag", "")
    if not isinstance(tag, str):
        raise ValueError("tag must be a string")
    return tag


def _status(controller: ModeAccessController) -> Dict[str, Any]:
    return {
        "mode": controller.mode.value,
        "has_privileged_access": controller.has_privileged_access,
        "has_pin": controller.has_pin,
    }


def serve(
    lines: Iterable[str],
    out: TextIO,
    agent: NotificationDeliveryAgent,
    controller: ModeAccessController,
) -> int:
    """
    Process newline-delimited JSON events in order, one at a time.

    Each event's result is written to out as one JSON line. Bad events are
    logged and reported as {"error": ...}; they never stop the loop.

    Returns:
        Number of events handled successfully.
    """
    handled = 0
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            event = json.loads(line)
            if not isinstance(event, dict):
                raise ValueError("event must be a JSON object")
            result = dispatch_event(event, agent, controller)
            handled += 1
        except ValueError as e:
            logger.warning(f"Skipping event {line[:80]!r}: {e}")
            result = {"error": str(e)}
        out.write(json.dumps(result) + "\n")
        out.flush()
    return handled


def run(args) -> int:
    """Run a single CLI command and return the exit code."""
    config = load_config()
    logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))
    conn = init_db(config.store.db_path)
    try:
        origin = config.agent.app_origin
        controller = ModeAccessController(conn, scope=origin)
        agent = NotificationDeliveryAgent(LoggingSurface(), _windows_from_urls(args.window, origin), origin)

        if args.command == "serve":
            logger.info(f"Serving events from stdin for {origin}")
            handled = serve(sys.stdin, sys.stdout, agent, controller)
            logger.info(f"Event stream ended after {handled} event(s)")
            return 0

        if args.command == "push":
            payload = args.payload if args.payload is not None else sys.stdin.read()
            event = {"type": "push", "payload": payload}
        elif args.command == "click":
            event = {"type": "click", "action": args.action, "tag": args.tag,
                     "data": {"url": args.url} if args.url else None}
        elif args.command == "close":
            event = {"type": "close", "tag": args.tag}
        elif args.command == "mode":
            event = {"type": "switch_mode", "mode": args.target, "pin": args.pin}
        elif args.command == "set-pin":
            event = {"type": "set_pin", "pin": args.pin}
        elif args.command == "sign-in":
            event = {"type": "auth", "event": AuthEvent.SIGNED_IN.value}
        elif args.command == "sign-out":
            event = {"type": "auth", "event": AuthEvent.SIGNED_OUT.value}
        else:
            event = {"type": "status"}

        try:
            result = dispatch_event(event, agent, controller)
        except ValueError as e:
            logger.error(str(e))
            return 2
        print(json.dumps(result))
        if result.get("success") is False:
            return 1
        return 0
    finally:
        conn.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ChatConnect push notification agent and chat mode controller"
    )
    parser.add_argument(
        "--window",
        action="append",
        default=None,
        help="URL of an open application window (repeatable); used when routing clicks"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    push = sub.add_parser("push", help="Handle one push message")
    push.add_argument("payload", nargs="?", default=None,
                      help="Raw payload (JSON or text); read from stdin when omitted")

    click = sub.add_parser("click", help="Handle a click on a notification")
    click.add_argument("--action", default=None, help="Action button id, e.g. 'open' or 'dismiss'")
    click.add_argument("--url", default=None, help="Notification data.url (default: /dashboard)")
    click.add_argument("--tag", default="", help="Notification tag")

    close = sub.add_parser("close", help="Record a notification closed without interaction")
    close.add_argument("--tag", default="", help="Notification tag")

    mode = sub.add_parser("mode", help="Switch chat mode")
    mode.add_argument("target", choices=[m.value for m in ChatMode])
    mode.add_argument("--pin", default=None, help="PIN required for lovers mode")

    set_pin = sub.add_parser("set-pin", help="Store or replace the lovers mode PIN")
    set_pin.add_argument("pin")

    sub.add_parser("sign-in", help="Apply a sign-in transition")
    sub.add_parser("sign-out", help="Apply a sign-out transition (clears the PIN)")
    sub.add_parser("status", help="Show the current mode")
    sub.add_parser("serve", help="Handle newline-delimited JSON events from stdin")

    return parser


def main():
    """Main entry point with command-line argument parsing."""
    args = build_parser().parse_args()
    try:
        sys.exit(run(args))
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
