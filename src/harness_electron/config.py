"""Configuration for harness-electron.

Settings come from (lowest to highest precedence) built-in defaults, a
``.env`` file, environment variables and explicit overrides from the CLI.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, List, Optional, Tuple

from dotenv import load_dotenv

ENV_PREFIX = "HARNESS_ELECTRON_"

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_SCREENSHOT_TIMEOUT_MS = 15000
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_LOCK_TIMEOUT_MS = 5000
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_ENV_LOADED = False


@dataclass(frozen=True)
class HarnessConfig:
    """Resolved runtime settings."""

    home: Path
    session_dir: Path
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    screenshot_timeout_ms: int = DEFAULT_SCREENSHOT_TIMEOUT_MS
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    lock_timeout_ms: int = DEFAULT_LOCK_TIMEOUT_MS
    log_level: str = DEFAULT_LOG_LEVEL
    env_errors: Tuple[str, ...] = field(default=(), compare=False)

    def with_overrides(self, **overrides: Any) -> "HarnessConfig":
        """Return a copy with every non-None override applied."""
        applied = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **applied) if applied else self

    def validate(self) -> List[str]:
        """Validate configuration values and return any errors."""
        errors = list(self.env_errors)

        if self.timeout_ms <= 0:
            errors.append("timeout_ms must be positive")

        if self.screenshot_timeout_ms <= 0:
            errors.append("screenshot_timeout_ms must be positive")

        if self.http_timeout <= 0:
            errors.append("http_timeout must be positive")

        if self.lock_timeout_ms <= 0:
            errors.append("lock_timeout_ms must be positive")

        if self.log_level.upper() not in _LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

        return errors


def load_config(cwd: Optional[Path] = None, **overrides: Any) -> HarnessConfig:
    """Load configuration from the environment and apply ``overrides``."""

    _ensure_env_loaded()
    base = Path(cwd) if cwd is not None else Path.cwd()
    errors: List[str] = []

    home = Path(_env("HOME") or base / ".harness-electron")
    session_dir = Path(_env("SESSION_DIR") or home / "sessions")

    config = HarnessConfig(
        home=home,
        session_dir=session_dir,
        timeout_ms=_env_number("TIMEOUT_MS", DEFAULT_TIMEOUT_MS, int, errors),
        screenshot_timeout_ms=_env_number(
            "SCREENSHOT_TIMEOUT_MS", DEFAULT_SCREENSHOT_TIMEOUT_MS, int, errors
        ),
        http_timeout=_env_number("HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT, float, errors),
        lock_timeout_ms=_env_number("LOCK_TIMEOUT_MS", DEFAULT_LOCK_TIMEOUT_MS, int, errors),
        log_level=(_env("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        env_errors=tuple(errors),
    )
    return config.with_overrides(**overrides)


def _env(name: str) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name, "").strip()
    return value or None


def _env_number(name: str, default, kind, errors: List[str]):
    raw = _env(name)
    if raw is None:
        return default
    try:
        return kind(raw)
    except ValueError:
        errors.append(f"{ENV_PREFIX}{name} must be a number, got {raw!r}")
        logging.getLogger(__name__).debug("Ignoring invalid %s%s=%r", ENV_PREFIX, name, raw)
        return default


def _ensure_env_loaded() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    _ENV_LOADED = True
    dotenv_path = Path.cwd() / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path)
    else:
        load_dotenv()
