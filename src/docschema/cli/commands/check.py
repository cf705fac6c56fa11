"""
docschema check command.

SUMMARY: Load and validate the document model without generating anything
"""

from __future__ import annotations

import argparse

from docschema.cli import OutputFormatter, add_standard_flags, load_model
from docschema.core.errors import ConfigError, DeclarationError, ModelDefinitionError

SUMMARY = "Load and validate the document model without generating anything"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        _, model = load_model(args)
    except ConfigError as e:
        formatter.error(e, error_code="config_error")
        return 1
    except DeclarationError as e:
        formatter.error(e, error_code="declaration_error", data={"problems": e.problems})
        if not formatter.json_mode:
            for problem in e.problems:
                formatter.text_kv("-", problem)
        return 1
    except ModelDefinitionError as e:
        formatter.error(
            e,
            error_code=type(e).__name__,
            data={"offending_id": e.offending_id},
        )
        return 1

    composition = {
        kind.value: [family.name for family in model.composition(kind)]
        for kind in model.kinds
    }
    sections = sum(len(f.section_ids) for f in model.families)
    formatter.success(
        {
            "families": len(model.families),
            "sections": sections,
            "enums": len(model.enums),
            "composition": composition,
        },
        f"Model OK: {len(model.families)} families, {sections} sections, "
        f"{len(model.kinds)} document kinds",
    )
    if not formatter.json_mode:
        for kind, families in composition.items():
            formatter.text_kv(kind, ", ".join(families))
    return 0
