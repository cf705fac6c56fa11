"""Domain-specific configuration accessors.

- GenerationConfig: model directory, output directory and artifact names
- LoggingConfig: log level and optional log file

Usage:
    from docschema.core.config.domains import GenerationConfig

    gen = GenerationConfig(repo_root=Path("/path/to/project"))
    out = gen.output_dir
"""
from __future__ import annotations

from .generation import GenerationConfig
from .logging import LoggingConfig

__all__ = ["GenerationConfig", "LoggingConfig"]
