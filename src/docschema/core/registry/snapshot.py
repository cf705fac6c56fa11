"""Validated, read-only snapshot of the document model.

A ``DocumentModel`` can only be produced by ``ModelRegistry.validate_composition``;
generators accept nothing else and may assume every invariant holds.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

from docschema.core.errors import UnknownIdError, UnvalidatedModelError
from docschema.core.model import (
    CompositionTable,
    DocumentKind,
    DocumentSpec,
    EnumDefinition,
    FamilyDefinition,
    FieldDefinition,
    SectionDefinition,
    document_field_qid,
    field_qid,
)

# Handed to DocumentModel only by the registry's validation pass.
_VALIDATED = object()


@dataclass(frozen=True)
class ComposedSection:
    """A section as used by one composition entry."""

    section: SectionDefinition
    key: str
    fields: Tuple[FieldDefinition, ...]

    @property
    def id(self) -> str:
        return self.section.id


@dataclass(frozen=True)
class ComposedFamily:
    """A family as it appears on one document kind."""

    name: str
    family: FamilyDefinition
    sections: Tuple[ComposedSection, ...]


@dataclass(frozen=True)
class FieldRef:
    """A field located in the model, with its qualified id."""

    qualified_id: str
    field: FieldDefinition
    family_id: Optional[int] = None
    section_id: Optional[str] = None

    @property
    def scope(self) -> str:
        if self.family_id is None:
            return "document"
        return "family" if self.section_id is None else "section"


class DocumentModel:
    """Immutable, validated view over the registered declarations."""

    def __init__(
        self,
        *,
        enums: Mapping[str, EnumDefinition],
        sections: Mapping[str, SectionDefinition],
        families: Mapping[int, FamilyDefinition],
        effective: Mapping[str, Tuple[FieldDefinition, ...]],
        keys: Mapping[str, str],
        table: CompositionTable,
        composition: Mapping[DocumentKind, Tuple[ComposedFamily, ...]],
        document: DocumentSpec,
        token: object = None,
    ) -> None:
        if token is not _VALIDATED:
            raise UnvalidatedModelError(
                "DocumentModel is produced by ModelRegistry.validate_composition(); "
                "construct the registry and validate it instead"
            )
        self._enums = MappingProxyType(dict(enums))
        self._sections = MappingProxyType(dict(sections))
        self._families = MappingProxyType(dict(families))
        self._effective = MappingProxyType(dict(effective))
        self._keys = MappingProxyType(dict(keys))
        self._table = table
        self._composition = MappingProxyType(dict(composition))
        self._document = document

    # ---------------------------------------------------------------- lookups

    @property
    def kinds(self) -> Tuple[DocumentKind, ...]:
        return self._table.kinds

    @property
    def table(self) -> CompositionTable:
        return self._table

    @property
    def document(self) -> DocumentSpec:
        return self._document

    @property
    def enums(self) -> Mapping[str, EnumDefinition]:
        return self._enums

    @property
    def families(self) -> Tuple[FamilyDefinition, ...]:
        """Families in id order."""
        return tuple(self._families[k] for k in sorted(self._families))

    def composition(self, kind: DocumentKind) -> Tuple[ComposedFamily, ...]:
        return self._composition[DocumentKind.parse(kind)]

    def family(self, family_id: int) -> FamilyDefinition:
        try:
            return self._families[int(family_id)]
        except (KeyError, ValueError):
            raise UnknownIdError(f"Unknown family id '{family_id}'", offending_id=str(family_id)) from None

    def section(self, section_id: str) -> SectionDefinition:
        try:
            return self._sections[section_id]
        except KeyError:
            raise UnknownIdError(f"Unknown section id '{section_id}'", offending_id=section_id) from None

    def resolve_enum(self, name: str) -> EnumDefinition:
        try:
            return self._enums[name]
        except KeyError:
            raise UnknownIdError(f"Unknown enum '{name}'", offending_id=name) from None

    def effective_fields(self, section_id: str) -> Tuple[FieldDefinition, ...]:
        """Fields of a family-listed section after inheritance."""
        try:
            return self._effective[section_id]
        except KeyError:
            raise UnknownIdError(f"Unknown section id '{section_id}'", offending_id=section_id) from None

    def section_key(self, section_id: str) -> str:
        return self._keys[section_id]

    def iter_field_refs(self) -> Iterator[FieldRef]:
        """Every field of the model: document fields, then each family's own
        fields and its sections' effective fields, in id order."""
        for f in self._document.fields:
            yield FieldRef(document_field_qid(f.name), f)
        for family in self.families:
            for f in family.fields:
                yield FieldRef(field_qid(family.id, None, f.name), f, family.id)
            for section_id in family.section_ids:
                for f in self._effective[section_id]:
                    yield FieldRef(field_qid(family.id, section_id, f.name), f, family.id, section_id)

    def __repr__(self) -> str:
        return (
            f"DocumentModel(families={len(self._families)}, sections={len(self._sections)}, "
            f"kinds={[k.value for k in self.kinds]})"
        )


__all__ = ["DocumentModel", "ComposedFamily", "ComposedSection", "FieldRef"]
