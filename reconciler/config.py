"""
Reconciler configuration.

All settings come from the environment (optionally seeded from a .env file) and are
validated once at startup into an immutable ReconcilerConfig that is handed to every
component. Nothing reads os.environ after load_config() returns.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from reconciler.exceptions import ConfigError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "t", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "f", "false", "no", "n", "off"}


@dataclass(frozen=True)
class ReconcilerConfig:
    cluster_url: str
    username: str
    password: str
    dry_run: bool = False
    request_timeout: Optional[float] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"ReconcilerConfig(cluster_url={self.cluster_url!r}, username={self.username!r}, "
            f"password='***', dry_run={self.dry_run}, request_timeout={self.request_timeout})"
        )


def parse_bool(raw: Optional[str]) -> bool:
    """Parse a boolean flag. Raises ValueError for anything unrecognised (including empty)."""
    value = str(raw or "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {raw!r}")


def _optional_float(name: str, raw: Optional[str]) -> Optional[float]:
    value = str(raw or "").strip()
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}") from exc
    if parsed <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return parsed


def _require_valid_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ConfigError("CB_URL must be a valid http(s) URL")


def load_config(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> ReconcilerConfig:
    """
    Build the reconciler configuration from environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)
        dotenv: Load a .env file from the working directory first. Variables already
            set in the environment are not overridden.

    Returns:
        Validated ReconcilerConfig

    Raises:
        ConfigError: On missing credentials, missing/invalid CB_URL or bad timeout
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    username = str(environ.get("CB_USERNAME", "")).strip()
    password = str(environ.get("CB_PASSWORD", ""))
    if not username or not password:
        raise ConfigError("Missing couchbase username or password env var (CB_USERNAME / CB_PASSWORD)")

    cluster_url = str(environ.get("CB_URL", "")).strip().rstrip("/")
    if not cluster_url:
        raise ConfigError("Set the env var for CB_URL")
    _require_valid_url(cluster_url)

    raw_dry_run = environ.get("DRY_RUN", "")
    try:
        dry_run = parse_bool(raw_dry_run)
    except ValueError:
        logger.info(f"DRY_RUN empty or not a boolean ({raw_dry_run!r}), defaulting to false")
        dry_run = False

    log_file = str(environ.get("LOG_FILE", "")).strip() or None

    return ReconcilerConfig(
        cluster_url=cluster_url,
        username=username,
        password=password,
        dry_run=dry_run,
        request_timeout=_optional_float("CB_REQUEST_TIMEOUT", environ.get("CB_REQUEST_TIMEOUT")),
        log_level=str(environ.get("LOG_LEVEL", "INFO")).strip().upper() or "INFO",
        log_file=log_file,
    )
