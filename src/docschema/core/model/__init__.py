"""Document model: kinds, wire types, constraints and definitions."""
from __future__ import annotations

from .composition import CompositionEntry, CompositionTable
from .definitions import (
    DocumentSpec,
    FamilyDefinition,
    FieldDefinition,
    SectionDefinition,
    applicability_map,
)
from .ids import (
    DOCUMENT_SCOPE,
    document_field_qid,
    family_qid,
    field_qid,
    section_qid,
)
from .kinds import ALL_KINDS, Applicability, DocumentKind
from .metadata import Metadata
from .types import BUILTIN_SCALARS, SCALARS, Constraint, EnumDefinition, WireType

__all__ = [
    "ALL_KINDS",
    "Applicability",
    "DocumentKind",
    "Metadata",
    "SCALARS",
    "BUILTIN_SCALARS",
    "Constraint",
    "EnumDefinition",
    "WireType",
    "FieldDefinition",
    "SectionDefinition",
    "FamilyDefinition",
    "DocumentSpec",
    "applicability_map",
    "CompositionEntry",
    "CompositionTable",
    "DOCUMENT_SCOPE",
    "family_qid",
    "section_qid",
    "field_qid",
    "document_field_qid",
]
