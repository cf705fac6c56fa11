"""
docschema configuration management (YAML-only).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from docschema.core.errors import ConfigError
from docschema.core.schemas import SchemaValidationError, validate_payload
from docschema.core.utils.io import read_yaml
from docschema.core.utils.merge import deep_merge as _deep_merge
from docschema.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "DOCSCHEMA_"
PROJECT_CONFIG_DIRNAME = ".docschema"
PROJECT_CONFIG_FILENAME = "config.yaml"


class ConfigManager:
    """Load, merge, and validate docschema configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: DOCSCHEMA_<section>__<key>
    2. Project config: <repo>/.docschema/config.yaml
    3. Bundled defaults: docschema.data/config/defaults.yaml
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else Path.cwd()
        self.defaults_path = get_data_path("config", "defaults.yaml")
        self.project_config_path = self.repo_root / PROJECT_CONFIG_DIRNAME / PROJECT_CONFIG_FILENAME

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        data = read_yaml(path, default={}, raise_on_error=True)
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must hold a YAML mapping: {path}")
        return data

    def validate_schema(self, config: Dict[str, Any], schema_name: str) -> None:
        try:
            validate_payload(config, schema_name)
        except SchemaValidationError as exc:
            raise ConfigError(str(exc)) from exc

    # ---------------------------------------------------------- env overrides

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _as_null(self, v: str) -> bool:
        return v.strip().lower() in {"null", "none", "~"}

    def _coerce_type(self, value: str) -> Any:
        if self._as_null(value):
            return None
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str, *, strict: bool) -> List[str]:
        if not raw:
            return []
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            if strict:
                raise ConfigError(f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.")
            return []
        # Normalize to lowercase so env overrides create canonical keys.
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            path = self._parse_env_key(key[len(ENV_PREFIX):], strict=strict)
            if not path:
                continue
            yield path, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur = root
        for part in path[:-1]:
            nxt = cur.get(part)
            if nxt is None:
                nxt = {}
                cur[part] = nxt
            elif not isinstance(nxt, dict):
                raise ConfigError(f"Env override path traverses non-mapping key '{part}'")
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool) -> None:
        for path, typed_value in self._iter_env_overrides(strict=strict):
            logger.debug("Config override from environment: %s", ".".join(path))
            self._set_nested(cfg, path, typed_value)

    # ----------------------------------------------------------------- loading

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge configuration from every source.

        Args:
            validate: If True, validate against the bundled config schema

        Raises:
            ConfigError: A source is malformed or the result fails the schema
        """
        cfg: Dict[str, Any] = self.load_yaml(self.defaults_path)

        if self.project_config_path.exists():
            logger.debug("Loading project config %s", self.project_config_path)
            cfg = self.deep_merge(cfg, self.load_yaml(self.project_config_path))

        self.apply_env_overrides(cfg, strict=validate)

        if validate:
            self.validate_schema(cfg, "config.schema.yaml")
        return cfg


__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_DIRNAME", "PROJECT_CONFIG_FILENAME"]
