"""Load model declarations from YAML sources.

Layout of a model directory::

    enums.yaml              named enums
    document.yaml           document fields, kind metadata, composition table
    families/*.yaml         one family per file, with its sections

Every file is checked against its definition in the bundled
``model.schema.yaml`` before conversion, so the converters below can index
mappings without defensive checks.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from docschema.core.errors import DeclarationError
from docschema.core.model import (
    ALL_KINDS,
    Applicability,
    CompositionTable,
    Constraint,
    DocumentKind,
    DocumentSpec,
    EnumDefinition,
    FamilyDefinition,
    FieldDefinition,
    Metadata,
    SectionDefinition,
    WireType,
)
from docschema.core.schemas import validate_payload_safe
from docschema.core.utils.io import iter_yaml_files, read_yaml
from docschema.data import get_data_path

logger = logging.getLogger(__name__)

MODEL_SCHEMA = "model.schema.yaml"

# Applicability key that fills every kind not listed explicitly.
ALL_KINDS_KEY = "*"


def default_model_dir() -> Path:
    """Directory of the bundled document model."""
    return get_data_path("model")


def load_declarations(model_dir: Optional[Path] = None) -> List[Any]:
    """Read every declaration under ``model_dir`` in registration order.

    Order: enums, families (sorted file names) with their sections, the
    document spec, then the composition table.

    Raises:
        DeclarationError: A file is missing, unreadable or fails its schema
    """
    root = Path(model_dir) if model_dir is not None else default_model_dir()
    logger.debug("Loading model declarations from %s", root)

    items: List[Any] = []
    enums_path = root / "enums.yaml"
    if enums_path.exists():
        data = _load(enums_path, "enumsFile")
        items.extend(enum_from_declaration(e) for e in data.get("enums") or [])

    family_files = iter_yaml_files(root / "families")
    for path in family_files:
        data = _load(path, "familyFile")
        family, sections = family_from_declaration(data)
        items.extend(sections)
        items.append(family)

    document_path = root / "document.yaml"
    if not document_path.exists():
        raise DeclarationError(f"Model directory has no document.yaml: {root}", source=str(document_path))
    data = _load(document_path, "documentFile")
    items.append(document_from_declaration(data))
    items.append(CompositionTable.from_declaration(data["composition"]))

    logger.info("Loaded %d declarations (%d family files) from %s", len(items), len(family_files), root)
    return items


def _load(path: Path, definition: str) -> Dict[str, Any]:
    try:
        data = read_yaml(path, default={}, raise_on_error=True)
    except (OSError, yaml.YAMLError) as exc:
        raise DeclarationError(f"Cannot read {path}: {exc}", source=str(path)) from exc

    problems = validate_payload_safe(data, MODEL_SCHEMA, definition=definition)
    if problems:
        listing = "; ".join(problems)
        raise DeclarationError(f"{path.name} does not match its schema: {listing}", source=str(path), problems=problems)
    return data


# ------------------------------------------------------------------ converters


def enum_from_declaration(data: Mapping[str, Any]) -> EnumDefinition:
    return EnumDefinition(
        name=str(data["name"]),
        values=tuple(str(v) for v in data["values"]),
        description=str(data.get("description", "")).strip(),
    )


def applicability_from_declaration(data: Mapping[str, Any]) -> Dict[DocumentKind, Applicability]:
    """Parse ``{kind: level}``; the ``"*"`` key covers every kind left unlisted."""
    out: Dict[DocumentKind, Applicability] = {}
    fallback = data.get(ALL_KINDS_KEY)
    for key, level in data.items():
        if key == ALL_KINDS_KEY:
            continue
        out[DocumentKind.parse(key)] = Applicability.parse(level)
    if fallback is not None:
        for kind in ALL_KINDS:
            out.setdefault(kind, Applicability.parse(fallback))
    return out


def field_from_declaration(data: Mapping[str, Any]) -> FieldDefinition:
    wire = WireType(
        name=str(data["type"]),
        is_list=bool(data.get("list", False)),
        nullable=data.get("nullable"),
    )
    raw_constraint = data.get("constraint")
    if raw_constraint is None:
        constraint = Constraint.for_wire_type(wire)
    else:
        constraint = Constraint.from_declaration(raw_constraint)
    return FieldDefinition(
        name=str(data["name"]),
        wire=wire,
        constraint=constraint,
        applicability=applicability_from_declaration(data.get("applicability") or {}),
        label=str(data.get("label", "")),
        metadata=Metadata.from_declaration(data),
    )


def _fields(raw: Optional[Sequence[Mapping[str, Any]]]) -> Tuple[FieldDefinition, ...]:
    return tuple(field_from_declaration(f) for f in raw or [])


def section_from_declaration(data: Mapping[str, Any]) -> SectionDefinition:
    parent = data.get("extends")
    return SectionDefinition(
        id=str(data["id"]),
        name=str(data["name"]),
        fields=_fields(data.get("fields")),
        parent_id=str(parent) if parent is not None else None,
        key=data.get("key"),
        metadata=Metadata.from_declaration(data),
    )


def family_from_declaration(data: Mapping[str, Any]) -> Tuple[FamilyDefinition, List[SectionDefinition]]:
    sections = [section_from_declaration(s) for s in data.get("sections") or []]
    raw_kinds = data.get("supported_kinds")
    kinds = tuple(DocumentKind.parse(k) for k in raw_kinds) if raw_kinds else ALL_KINDS
    family = FamilyDefinition(
        id=int(data["id"]),
        name=str(data["name"]),
        version=str(data["version"]),
        section_ids=tuple(s.id for s in sections),
        supported_kinds=kinds,
        fields=_fields(data.get("fields")),
        section_fields=_fields(data.get("section_fields")),
        relation=data.get("relation"),
        metadata=Metadata.from_declaration(data),
    )
    return family, sections


def document_from_declaration(data: Mapping[str, Any]) -> DocumentSpec:
    kinds = data.get("kinds") or {}
    return DocumentSpec(
        fields=_fields(data.get("fields")),
        kind_metadata={DocumentKind.parse(k): Metadata.from_declaration(v or {}) for k, v in kinds.items()},
    )


__all__ = [
    "MODEL_SCHEMA",
    "default_model_dir",
    "load_declarations",
    "enum_from_declaration",
    "applicability_from_declaration",
    "field_from_declaration",
    "section_from_declaration",
    "family_from_declaration",
    "document_from_declaration",
]
