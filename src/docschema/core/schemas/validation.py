"""Shared schema validation utilities.

Declaration sources (model YAML files) and the merged configuration are
validated with JSON Schema. Schemas are stored as YAML files under the
bundled ``docschema.data/schemas/`` directory and loaded in a single,
consistent way across the codebase.

A schema file may hold several named definitions under ``$defs``; pass
``definition=`` to validate against one of them.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import jsonschema
from jsonschema import Draft202012Validator

from docschema.core.utils.io import read_yaml
from docschema.data import get_data_path


class SchemaValidationError(ValueError):
    """Raised when schema validation fails."""

    pass


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema dict.

    Canonical schema serialization format is YAML (JSON Schema expressed in YAML).
    Automatically appends ``.yaml`` if no extension is present.

    Args:
        schema_name: Relative schema file path under the schemas root
            (e.g., "model.schema.yaml" or "config.schema").

    Raises:
        FileNotFoundError: If schema file doesn't exist.
        ValueError: If schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.yaml"

    schema_path = get_data_path("schemas", schema_name)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name}\nSearched:\n- {schema_path.parent}")

    schema = read_yaml(schema_path, default=None, raise_on_error=True)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def _select(schema: Dict[str, Any], definition: Optional[str]) -> Dict[str, Any]:
    if definition is None:
        return schema
    if definition not in (schema.get("$defs") or {}):
        raise ValueError(f"Schema has no definition named '{definition}'")
    # Keep $defs reachable so nested $refs still resolve.
    return dict(schema, **{"$ref": f"#/$defs/{definition}"})


def validate_payload(
    payload: Any,
    schema_name: str,
    *,
    definition: Optional[str] = None,
) -> None:
    """Validate a payload against a bundled JSON schema.

    Raises:
        SchemaValidationError: If validation fails.
        FileNotFoundError: If schema doesn't exist.
    """
    schema = _select(load_schema(schema_name), definition)

    try:
        jsonschema.validate(instance=payload, schema=schema, cls=Draft202012Validator)
    except jsonschema.ValidationError as exc:
        raise SchemaValidationError(
            f"Validation failed against schema '{schema_name}': {exc.message}"
        ) from exc


def validate_payload_safe(
    payload: Any,
    schema_name: str,
    *,
    definition: Optional[str] = None,
) -> List[str]:
    """Validate a payload and return list of error messages (empty if valid).

    This is a safe variant that returns errors instead of raising exceptions,
    useful for collecting multiple validation errors.
    """
    try:
        schema = _select(load_schema(schema_name), definition)
    except (OSError, ValueError) as e:
        return [f"Schema loading failed: {e}"]

    errors: List[str] = []
    validator = Draft202012Validator(schema)
    for error in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path]):
        if error.absolute_path:
            path_str = ".".join(str(p) for p in error.absolute_path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


__all__ = [
    "load_schema",
    "validate_payload",
    "validate_payload_safe",
    "SchemaValidationError",
]
