"""Centralized configuration caching.

All domain configs read the merged configuration through this module so a
process loads each project's config once.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .manager import ENV_PREFIX, PROJECT_CONFIG_DIRNAME, PROJECT_CONFIG_FILENAME, ConfigManager

_config_cache: Dict[str, Dict[str, Any]] = {}


def _normalize_repo_root(repo_root: Optional[Path]) -> Path:
    if repo_root is None:
        return Path.cwd().resolve()
    return Path(repo_root).expanduser().resolve()


def _cache_key(repo_root: Path) -> str:
    """Cache key from repo_root, environment overrides and project config mtime.

    Tests and long-running processes may change DOCSCHEMA_* variables or the
    project config file after a first load; both must invalidate the entry.
    """
    env_items = sorted((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX))
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    cfg_path = repo_root / PROJECT_CONFIG_DIRNAME / PROJECT_CONFIG_FILENAME
    try:
        st = cfg_path.stat()
        cfg_fp = f"{st.st_mtime_ns}-{st.st_size}"
    except OSError:
        cfg_fp = "none"
    return f"{repo_root}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None, validate: bool = True) -> Dict[str, Any]:
    """Get configuration with caching.

    Returns the same config dict instance for an unchanged repo_root
    (treat it as immutable).
    """
    normalized_root = _normalize_repo_root(repo_root)
    key = _cache_key(normalized_root)
    if key not in _config_cache:
        _config_cache[key] = ConfigManager(repo_root=normalized_root).load_config(validate=validate)
    return _config_cache[key]


def clear_all_caches() -> None:
    """Clear all configuration caches."""
    _config_cache.clear()


def is_cached(repo_root: Optional[Path] = None) -> bool:
    return _cache_key(_normalize_repo_root(repo_root)) in _config_cache


__all__ = ["get_cached_config", "clear_all_caches", "is_cached"]
