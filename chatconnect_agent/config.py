"""Configuration management."""

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()


@dataclass
class AgentConfig:
    """Notification agent configuration."""
    app_origin: str    # e.g. "https://chatconnect.app"; windows outside it are ignored


@dataclass
class StoreConfig:
    """Durable store configuration."""
    db_path: str


@dataclass
class AppConfig:
    """Complete application configuration."""
    agent: AgentConfig
    store: StoreConfig
    log_level: str


def _normalize_origin(value: str) -> str:
    """Reduce a URL to scheme://host[:port] and reject anything that isn't one."""
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(
            f"APP_ORIGIN must be an http(s) origin such as https://example.com, got {value!r}"
        )
    return f"{parsed.scheme}://{parsed.netloc}"


def load_config() -> AppConfig:
    """
    Load configuration from environment variables.

    Raises:
        ValueError: If a configuration value is invalid.
    """
    db_path = os.getenv("DB_PATH", "chatconnect_state.db")
    if not db_path.strip():
        raise ValueError("DB_PATH must not be empty")

    app_origin = _normalize_origin(os.getenv("APP_ORIGIN", "http://localhost:8080"))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    return AppConfig(
        agent=AgentConfig(app_origin=app_origin),
        store=StoreConfig(db_path=db_path),
        log_level=log_level,
    )
