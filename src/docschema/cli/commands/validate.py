"""
docschema validate command.

SUMMARY: Validate a YAML or JSON document record against its kind
"""

from __future__ import annotations

import argparse
from pathlib import Path

import yaml

from docschema.cli import OutputFormatter, add_standard_flags, get_repo_root, load_model
from docschema.core.errors import ConfigError, ModelDefinitionError
from docschema.core.generators import StructuralValidatorAssembler
from docschema.core.model import DocumentKind
from docschema.core.utils.io import read_yaml

SUMMARY = "Validate a YAML or JSON document record against its kind"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "kind",
        type=str,
        help="Document kind (Plan, Task, Project, Module, Feature)",
    )
    parser.add_argument(
        "file",
        type=str,
        help="Record file; JSON is read as YAML",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        kind = DocumentKind.parse(args.kind)
    except ValueError as e:
        formatter.error(e, error_code="unknown_kind")
        return 1

    path = Path(args.file)
    if not path.is_absolute():
        path = get_repo_root(args) / path
    try:
        record = read_yaml(path, raise_on_error=True)
    except FileNotFoundError as e:
        formatter.error(e, error_code="not_found")
        return 1
    except (OSError, yaml.YAMLError) as e:
        formatter.error(e, f"Cannot parse {path}: {e}", error_code="parse_error")
        return 1

    try:
        _, model = load_model(args)
        result = StructuralValidatorAssembler(model).assemble().validate(kind, record)
    except ConfigError as e:
        formatter.error(e, error_code="config_error")
        return 1
    except ModelDefinitionError as e:
        formatter.error(e, error_code=type(e).__name__, data={"offending_id": e.offending_id})
        return 1

    if result.ok:
        formatter.success({"kind": kind.value, "file": str(path), "valid": True}, f"{path}: valid {kind.value}")
        return 0

    failures = [
        {"path": f.path, "qualified_id": f.qualified_id, "message": f.message}
        for f in result.errors
    ]
    if formatter.json_mode:
        formatter.json_output(
            {"status": "invalid", "kind": kind.value, "file": str(path), "valid": False, "errors": failures}
        )
    else:
        formatter.text(f"{path}: invalid {kind.value} ({len(failures)} errors)")
        for failure in result.errors:
            formatter.text_kv(failure.path, f"{failure.message} [{failure.qualified_id}]")
    return 1
