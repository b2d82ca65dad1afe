from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

LOGGER_NAME = "HighlightOverlay"
PROPAGATE_ENV_VAR = "HIGHLIGHT_OVERLAY_PROPAGATE_LOGS"
INSTANCE_LOGGER_SUFFIX = "Highlighter"

# Index order matches the numeric levels accepted in options (0=debug .. 3=error).
_LEVEL_NAMES = ("debug", "info", "warn", "error")
_LEVELS_BY_NAME = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

def package_logger() -> logging.Logger:
    """Return the package logger, honouring the propagation opt-in."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = os.environ.get(PROPAGATE_ENV_VAR, "").lower() in {"1", "true", "yes", "on"}
    return logger


def parse_log_level(value: Any, default: int = logging.ERROR) -> int:
    """Map a level name or numeric index to a stdlib logging level.

    Strings are matched case-insensitively after trimming. Numbers are floored
    and must fall in 0..3 (debug..error). Anything else yields ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        return _LEVELS_BY_NAME.get(value.strip().lower(), default)
    if isinstance(value, (int, float)):
        try:
            index = int(value // 1)
        except (OverflowError, ValueError):
            return default
        if 0 <= index < len(_LEVEL_NAMES):
            return _LEVELS_BY_NAME[_LEVEL_NAMES[index]]
    return default


class InstanceLogger(logging.LoggerAdapter):
    """Per-instance view of the shared highlighter logger with its own threshold."""

    def __init__(self, logger: logging.Logger, level: int) -> None:
        super().__init__(logger, {})
        self.level = level

    def setLevel(self, level: int) -> None:
        self.level = level

    def isEnabledFor(self, level: int) -> bool:
        return level >= self.level and self.logger.isEnabledFor(level)


def instance_logger(level: int) -> InstanceLogger:
    """Wrap the shared highlighter logger with a level of its own.

    Instances share one registered logger so creating and disposing
    highlighters never grows the logging registry.
    """
    shared = package_logger().getChild(INSTANCE_LOGGER_SUFFIX)
    # Thresholds live on the adapters.
    shared.setLevel(logging.DEBUG)
    return InstanceLogger(shared, level)


def resolve_logs_dir(log_dir_name: str = "HighlightOverlay") -> Path:
    """
    Resolve the directory to store overlay logs.

    Strategy:
    - Use HIGHLIGHT_OVERLAY_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get("HIGHLIGHT_OVERLAY_LOG_DIR")
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "logs")
    candidates.append(cache_home / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler
