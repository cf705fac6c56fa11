"""docschema configuration system.

Usage:
    from docschema.core.config import ConfigManager, GenerationConfig

    config = ConfigManager(repo_root=Path("/path/to/project")).load_config()
    gen = GenerationConfig(repo_root=Path("/path/to/project"))
"""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config, is_cached
from .domains import GenerationConfig, LoggingConfig
from .manager import ConfigManager

__all__ = [
    "ConfigManager",
    "BaseDomainConfig",
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
    "GenerationConfig",
    "LoggingConfig",
]
