"""Shared CLI utilities."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Tuple

from docschema.core.config import GenerationConfig, LoggingConfig
from docschema.core.registry import DocumentModel, ModelRegistry
from docschema.core.stdlib_logging import configure_logging


def get_repo_root(args: argparse.Namespace) -> Path:
    """Repository root from ``--repo-root``, else the working directory."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return Path.cwd().resolve()


def setup_logging(repo_root: Path) -> None:
    """Configure stdlib logging from the ``logging`` config section."""
    cfg = LoggingConfig(repo_root=repo_root)
    configure_logging(cfg.level, cfg.path)


def load_model(args: argparse.Namespace) -> Tuple[GenerationConfig, DocumentModel]:
    """Load configuration, then load and validate the model it points at.

    Raises:
        ConfigError: The configuration is invalid
        ModelDefinitionError: The model fails loading or validation
    """
    repo_root = get_repo_root(args)
    config = GenerationConfig(repo_root=repo_root)
    model_dir = Path(args.model_dir).resolve() if getattr(args, "model_dir", None) else config.model_dir
    model = ModelRegistry.load(model_dir).validate()
    return config, model


__all__ = ["get_repo_root", "setup_logging", "load_model"]
