"""Stdlib logging setup for the docschema CLI.

Library modules only create module loggers; handlers are installed here, once
per process, by the CLI entry point.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from docschema.core.utils.io import ensure_directory

_INSTALLED_HANDLER: Optional[logging.Handler] = None
_CONFIGURED_TARGET: Optional[str] = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str = "WARNING", log_path: Optional[Path] = None) -> None:
    """Install one handler on the root logger: a file when ``log_path`` is set,
    stderr otherwise.

    Idempotent per-process: if already configured for the same target, only
    the level is updated.
    """
    global _INSTALLED_HANDLER, _CONFIGURED_TARGET

    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    if _INSTALLED_HANDLER is not None and _CONFIGURED_TARGET == target:
        _INSTALLED_HANDLER.setLevel(_level_from_name(level))
        return

    if _INSTALLED_HANDLER is not None:
        root.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()

    handler: logging.Handler
    if log_path is not None:
        ensure_directory(Path(target).parent)
        handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    _INSTALLED_HANDLER = handler
    _CONFIGURED_TARGET = target


def reset_logging_for_tests() -> None:
    """Test-only: remove the handler installed by ``configure_logging``."""
    global _INSTALLED_HANDLER, _CONFIGURED_TARGET
    if _INSTALLED_HANDLER is not None:
        logging.getLogger().removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()
    _INSTALLED_HANDLER = None
    _CONFIGURED_TARGET = None


__all__ = ["configure_logging", "reset_logging_for_tests", "LOG_FORMAT"]
