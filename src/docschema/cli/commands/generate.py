"""
docschema generate command.

SUMMARY: Generate the wire schema, validator schemas and documentation index
"""

from __future__ import annotations

import argparse
from pathlib import Path

from docschema.cli import OutputFormatter, add_dry_run_flag, add_standard_flags, get_repo_root, load_model
from docschema.core.errors import ConfigError, ModelDefinitionError
from docschema.core.generators import generate_artifacts, write_artifacts

SUMMARY = "Generate the wire schema, validator schemas and documentation index"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output-dir",
        "-o",
        type=str,
        help="Directory to write artifacts to (default: generation.output_dir)",
    )
    add_dry_run_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config, model = load_model(args)
        artifacts = generate_artifacts(model, config)
    except ConfigError as e:
        formatter.error(e, error_code="config_error")
        return 1
    except ModelDefinitionError as e:
        formatter.error(e, error_code=type(e).__name__, data={"offending_id": e.offending_id})
        return 1

    if args.output_dir:
        output_dir = Path(args.output_dir)
        if not output_dir.is_absolute():
            output_dir = get_repo_root(args) / output_dir
    else:
        output_dir = config.output_dir

    files = sorted(artifacts.files(config))

    if args.dry_run:
        formatter.success(
            {"output_dir": str(output_dir), "files": files, "dry_run": True},
            f"Would write {len(files)} files to {output_dir}",
        )
        if not formatter.json_mode:
            for name in files:
                formatter.text_kv("-", name)
        return 0

    try:
        written = write_artifacts(artifacts, output_dir, config)
    except OSError as e:
        formatter.error(e, error_code="write_error")
        return 1

    formatter.success(
        {"output_dir": str(output_dir), "files": [str(p) for p in written]},
        f"Wrote {len(written)} files to {output_dir}",
    )
    return 0
