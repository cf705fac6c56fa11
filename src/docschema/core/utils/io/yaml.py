"""YAML readers for declaration sources, project config and candidate records.

JSON is a subset of YAML here, so records exported as JSON load the same way.
"""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any, List

import yaml


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Load one YAML document under a shared lock.

    A missing file, an unreadable file or a parse error yields ``default``.
    An empty document also yields ``default``.

    Args:
        path: File to load
        default: Fallback value
        raise_on_error: Propagate ``FileNotFoundError``, ``OSError`` and
            ``yaml.YAMLError`` instead of falling back
    """
    source = Path(path)
    if not source.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {source}")
        return default

    try:
        with source.open("r", encoding="utf-8") as handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_SH)
            try:
                data = yaml.safe_load(handle)
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


def iter_yaml_files(dir_path: Path) -> List[Path]:
    """Declaration files in ``dir_path``, sorted by stem.

    ``*.yaml`` wins over ``*.yml`` when both share a stem, so
    ``1-meta.yaml`` and a stale ``1-meta.yml`` never load the same family twice.
    """
    root = Path(dir_path)
    if not root.is_dir():
        return []
    by_stem = {p.stem: p for p in root.glob("*.yml")}
    by_stem.update({p.stem: p for p in root.glob("*.yaml")})
    return [by_stem[stem] for stem in sorted(by_stem)]


__all__ = [
    "read_yaml",
    "iter_yaml_files",
]
