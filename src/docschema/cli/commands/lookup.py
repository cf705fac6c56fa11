"""
docschema lookup command.

SUMMARY: Show documentation metadata for a qualified id
"""

from __future__ import annotations

import argparse

from docschema.cli import OutputFormatter, add_standard_flags, load_model
from docschema.core.errors import ConfigError, ModelDefinitionError, UnknownIdError
from docschema.core.generators import MetadataExtractor

SUMMARY = "Show documentation metadata for a qualified id"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "qualified_id",
        type=str,
        help="Qualified id, e.g. Task, 1, 1.1, 1.1.progress, document.title",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        _, model = load_model(args)
        entry = MetadataExtractor(model).extract().lookup(args.qualified_id)
    except UnknownIdError as e:
        formatter.error(e, error_code="unknown_id")
        return 1
    except ConfigError as e:
        formatter.error(e, error_code="config_error")
        return 1
    except ModelDefinitionError as e:
        formatter.error(e, error_code=type(e).__name__, data={"offending_id": e.offending_id})
        return 1

    data = entry.to_dict()
    if formatter.json_mode:
        formatter.json_output(data)
        return 0

    formatter.text(f"{entry.qualified_id} ({entry.scope}): {entry.name}")
    for key, value in data.items():
        if key in ("qualified_id", "scope", "name"):
            continue
        if isinstance(value, (list, tuple)):
            value = "; ".join(str(v) for v in value)
        elif isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in value.items())
        formatter.text_kv(key, value)
    return 0
