"""I/O utilities.

This package provides safe file operations:
- Core: staged multi-file writes, directory helpers
- YAML: declaration and record readers
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write_many,
    ensure_directory,
    ensure_parent_dir,
)
from .yaml import (
    iter_yaml_files,
    read_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write_many",
    # yaml
    "read_yaml",
    "iter_yaml_files",
]
