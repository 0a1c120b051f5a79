"""Configuration helpers for the Webmaster Tools CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .webmaster import API_URL

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _default_db_url() -> str:
    return "sqlite:///webmaster.db"


@dataclass(frozen=True)
class Settings:
    consumer_key: str
    consumer_secret: str
    oauth_token: str
    oauth_token_secret: str
    api_url: str
    db_url: str
    template_dir: Optional[Path]
    log_level: str
    verify_ssl: bool
    timeout: float


def load_settings() -> Settings:
    load_dotenv()

    template_dir = os.getenv("WMT_TEMPLATE_DIR", "")
    timeout = os.getenv("WMT_TIMEOUT", "30")
    try:
        timeout_value = float(timeout)
    except ValueError as exc:
        raise ConfigurationError(f"WMT_TIMEOUT must be a number, got {timeout!r}") from exc

    return Settings(
        consumer_key=os.getenv("WMT_CONSUMER_KEY", ""),
        consumer_secret=os.getenv("WMT_CONSUMER_SECRET", ""),
        oauth_token=os.getenv("WMT_OAUTH_TOKEN", ""),
        oauth_token_secret=os.getenv("WMT_OAUTH_TOKEN_SECRET", ""),
        api_url=os.getenv("WMT_API_URL", API_URL),
        db_url=os.getenv("WMT_DB_URL", _default_db_url()),
        template_dir=Path(template_dir) if template_dir else None,
        log_level=os.getenv("WMT_LOG_LEVEL", "INFO"),
        verify_ssl=os.getenv("WMT_VERIFY_SSL", "true").strip().lower() in _TRUE_VALUES,
        timeout=timeout_value,
    )


def ensure_required_credentials(settings: Settings) -> None:
    missing = []
    if not settings.consumer_key:
        missing.append("WMT_CONSUMER_KEY")
    if not settings.consumer_secret:
        missing.append("WMT_CONSUMER_SECRET")

    if missing:
        msg = ", ".join(missing)
        raise ConfigurationError(f"Missing required OAuth configuration: {msg}")


def ensure_runtime_directories(settings: Settings) -> None:
    if settings.db_url.startswith("sqlite:///"):
        db_file = Path(settings.db_url.replace("sqlite:///", "", 1))
        if db_file.parent != Path("/"):
            db_file.parent.mkdir(parents=True, exist_ok=True)
