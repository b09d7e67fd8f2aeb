"""User configuration: default workspace root file and environment overrides."""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path

from .scheduler import DEFAULT_DEBOUNCE_MS

CONFIG_FILE_NAME = ".signpost.cfg"
DEFAULT_EDITOR_COMMAND = "code"
DEFAULT_LOG_LEVEL = "WARNING"

logger = logging.getLogger(__name__)


def config_file_path() -> Path:
    return Path.home() / CONFIG_FILE_NAME


def load_default_root(cfg_path: Path | None = None) -> Path:
    """Resolve the workspace root when no CLI path is provided."""
    fallback = Path.home()
    cfg_path = cfg_path or config_file_path()
    try:
        if not cfg_path.exists():
            return fallback
        raw = cfg_path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, exc)
        return fallback
    if not raw:
        return fallback
    candidate = Path(raw).expanduser()
    if candidate.is_dir():
        return candidate.resolve()
    logger.info("Configured root %s is not a directory; using %s", candidate, fallback)
    return fallback


def persist_root(root: Path, cfg_path: Path | None = None) -> bool:
    """Remember `root` as the default workspace for the next launch."""
    cfg_path = cfg_path or config_file_path()
    try:
        cfg_path.write_text(f"{root}\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not save %s: %s", cfg_path, exc)
        return False
    return True


def debounce_ms_from_env(environ: dict | None = None) -> int:
    environ = os.environ if environ is None else environ
    raw = str(environ.get("SIGNPOST_DEBOUNCE_MS", "")).strip()
    if not raw:
        return DEFAULT_DEBOUNCE_MS
    try:
        value = int(raw)
    except ValueError:
        logger.warning("SIGNPOST_DEBOUNCE_MS=%r is not an integer; using %d", raw, DEFAULT_DEBOUNCE_MS)
        return DEFAULT_DEBOUNCE_MS
    if value < 0:
        logger.warning("SIGNPOST_DEBOUNCE_MS=%d is negative; using %d", value, DEFAULT_DEBOUNCE_MS)
        return DEFAULT_DEBOUNCE_MS
    return value


def editor_command(environ: dict | None = None) -> list[str]:
    """Launcher argv used to open a document, without the path."""
    environ = os.environ if environ is None else environ
    raw = str(environ.get("SIGNPOST_EDITOR", "")).strip()
    return shlex.split(raw) if raw else [DEFAULT_EDITOR_COMMAND]


def log_level_from_env(environ: dict | None = None) -> str:
    environ = os.environ if environ is None else environ
    value = str(environ.get("SIGNPOST_LOG_LEVEL", "")).strip().upper()
    if not value:
        return DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(value), int):
        logger.warning("Unknown SIGNPOST_LOG_LEVEL=%r; using %s", value, DEFAULT_LOG_LEVEL)
        return DEFAULT_LOG_LEVEL
    return value
