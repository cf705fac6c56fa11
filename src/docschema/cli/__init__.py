"""
docschema CLI package.

Commands are auto-discovered from ``cli/commands/*.py``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import (
    add_json_flag,
    add_repo_root_flag,
    add_model_dir_flag,
    add_dry_run_flag,
    add_standard_flags,
)
from ._utils import get_repo_root, load_model, setup_logging

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_repo_root_flag",
    "add_model_dir_flag",
    "add_dry_run_flag",
    "add_standard_flags",
    # Utilities
    "get_repo_root",
    "load_model",
    "setup_logging",
]
