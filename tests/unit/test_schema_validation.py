"""Bundled JSON Schemas for declarations and configuration."""
from __future__ import annotations

import pytest
from jsonschema import Draft202012Validator

from docschema.core.schemas import (
    SchemaValidationError,
    load_schema,
    validate_payload,
    validate_payload_safe,
)


@pytest.mark.parametrize("name", ["model.schema.yaml", "config.schema"])
def test_bundled_schemas_are_valid(name: str) -> None:
    Draft202012Validator.check_schema(load_schema(name))


def test_missing_schema() -> None:
    with pytest.raises(FileNotFoundError):
        load_schema("nope.schema.yaml")


def test_validate_payload_against_definition() -> None:
    validate_payload({"enums": [{"name": "Level", "values": ["LOW"]}]}, "model.schema.yaml", definition="enumsFile")
    with pytest.raises(SchemaValidationError):
        validate_payload({"enums": [{"name": "Level", "values": []}]}, "model.schema.yaml", definition="enumsFile")


def test_unknown_definition() -> None:
    with pytest.raises(ValueError, match="no definition"):
        validate_payload({}, "model.schema.yaml", definition="nothing")


def test_safe_variant_collects_every_problem() -> None:
    entry = {"family": "one", "sections": ["1.1"], "extra": True}
    problems = validate_payload_safe(entry, "model.schema.yaml", definition="compositionEntry")
    assert len(problems) == 2
    assert any(p.startswith("family:") for p in problems)


def test_safe_variant_reports_schema_loading() -> None:
    assert validate_payload_safe({}, "nope.schema.yaml")[0].startswith("Schema loading failed")
