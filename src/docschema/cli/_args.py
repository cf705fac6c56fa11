"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --repo-root flag for repository root override."""
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Override repository root path (where .docschema/config.yaml lives)",
    )


def add_model_dir_flag(parser: argparse.ArgumentParser) -> None:
    """Add --model-dir flag overriding generation.model_dir."""
    parser.add_argument(
        "--model-dir",
        type=str,
        help="Model directory to load instead of the configured one",
    )


def add_dry_run_flag(parser: argparse.ArgumentParser) -> None:
    """Add --dry-run flag."""
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="Show what would be done without making changes",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Flags every model command accepts."""
    add_json_flag(parser)
    add_repo_root_flag(parser)
    add_model_dir_flag(parser)


__all__ = [
    "add_json_flag",
    "add_repo_root_flag",
    "add_model_dir_flag",
    "add_dry_run_flag",
    "add_standard_flags",
]
