"""Base class for domain-specific configuration accessors."""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .cache import get_cached_config


class BaseDomainConfig(ABC):
    """Typed access to one top-level section of the configuration.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "mySection"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("mySetting", "default")

    Pass ``config`` to read from an already merged mapping instead of the
    cached project configuration.
    """

    def __init__(self, repo_root: Optional[Path] = None, *, config: Optional[Mapping[str, Any]] = None) -> None:
        self._repo_root = repo_root
        self._config = dict(config) if config is not None else get_cached_config(repo_root=repo_root)

    @property
    def repo_root(self) -> Path:
        return Path(self._repo_root) if self._repo_root else Path.cwd()

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level config key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """This domain's configuration section, or an empty dict."""
        return self._config.get(self._config_section(), {}) or {}

    def _resolve_path(self, raw: str) -> Path:
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = self.repo_root / path
        return path


__all__ = ["BaseDomainConfig"]
