"""Field, section, family and document-level definitions.

Every definition is a frozen dataclass assembled once at load time. Ordered
maps are held as tuples (declaration order is emission order) with lookups
by name.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from docschema.core.utils.text import camel_case, pascal_case

from .kinds import ALL_KINDS, Applicability, DocumentKind
from .metadata import Metadata
from .types import Constraint, WireType


@dataclass(frozen=True)
class FieldDefinition:
    """Atomic declaration of one attribute.

    Attributes:
        name: Field name, unique within its section
        wire: GraphQL wire type
        constraint: Structural rule for runtime validation
        applicability: Required/optional/omitted per document kind
        label: Display label
        metadata: Descriptive text (advisory only)
    """

    name: str
    wire: WireType
    constraint: Constraint
    applicability: Mapping[DocumentKind, Applicability] = field(default_factory=dict)
    label: str = ""
    metadata: Metadata = field(default_factory=Metadata)

    def __post_init__(self) -> None:
        if not isinstance(self.applicability, MappingProxyType):
            object.__setattr__(self, "applicability", MappingProxyType(dict(self.applicability)))

    def missing_kinds(self) -> Tuple[DocumentKind, ...]:
        return tuple(k for k in ALL_KINDS if k not in self.applicability)

    def applicability_for(self, kind: DocumentKind) -> Applicability:
        return self.applicability[kind]

    def is_required(self, kind: DocumentKind) -> bool:
        return self.applicability.get(kind) is Applicability.REQUIRED

    def is_omitted(self, kind: DocumentKind) -> bool:
        return self.applicability.get(kind) is Applicability.OMITTED

    @property
    def derived_nullable(self) -> bool:
        """Base wire nullability implied by applicability.

        A field required for even one kind is non-nullable at the base level.
        """
        return not any(level is Applicability.REQUIRED for level in self.applicability.values())

    @property
    def nullable(self) -> bool:
        if self.wire.nullable is None:
            return self.derived_nullable
        return self.wire.nullable


@dataclass(frozen=True)
class SectionDefinition:
    """A numbered group of fields for one sub-topic of a family.

    ``parent_id`` names the base section a specialization extends. The
    relation key (the field through which the family reaches the section)
    defaults to the camelCase name, or to the base section's key for a
    specialization; the registry resolves that default.
    """

    id: str
    name: str
    fields: Tuple[FieldDefinition, ...] = ()
    parent_id: Optional[str] = None
    key: Optional[str] = None
    metadata: Metadata = field(default_factory=Metadata)

    @property
    def family_id(self) -> int:
        head = self.id.split(".", 1)[0]
        return int(head) if head.isdigit() else -1

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def field(self, name: str) -> FieldDefinition:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def with_field(self, new_field: FieldDefinition) -> "SectionDefinition":
        return replace(self, fields=self.fields + (new_field,))

    @property
    def type_stem(self) -> str:
        """Stem of generated type names, e.g. ``1_1_Status``."""
        return f"{self.id.replace('.', '_')}_{pascal_case(self.name)}"


@dataclass(frozen=True)
class FamilyDefinition:
    """A numbered group of sections for one major topic.

    ``section_fields`` is the family's shared base shape: fields every
    section of the family starts with before its own declarations.
    """

    id: int
    name: str
    version: str
    section_ids: Tuple[str, ...] = ()
    supported_kinds: Tuple[DocumentKind, ...] = ALL_KINDS
    fields: Tuple[FieldDefinition, ...] = ()
    section_fields: Tuple[FieldDefinition, ...] = ()
    relation: Optional[str] = None
    metadata: Metadata = field(default_factory=Metadata)

    def supports(self, kind: DocumentKind) -> bool:
        return kind in self.supported_kinds

    @property
    def relation_name(self) -> str:
        return self.relation or camel_case(self.name)

    @property
    def type_stem(self) -> str:
        """Stem of generated type names, e.g. ``1_MetaGovernance``."""
        return f"{self.id}_{pascal_case(self.name)}"


@dataclass(frozen=True)
class DocumentSpec:
    """Document-level fields shared by every kind, plus per-kind metadata."""

    fields: Tuple[FieldDefinition, ...] = ()
    kind_metadata: Mapping[DocumentKind, Metadata] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.kind_metadata, MappingProxyType):
            object.__setattr__(self, "kind_metadata", MappingProxyType(dict(self.kind_metadata)))

    def metadata_for(self, kind: DocumentKind) -> Metadata:
        return self.kind_metadata.get(kind, Metadata())


def applicability_map(data: Mapping[str, str]) -> Dict[DocumentKind, Applicability]:
    """Parse a ``{kind: level}`` mapping from a declaration."""
    return {DocumentKind.parse(k): Applicability.parse(v) for k, v in data.items()}


__all__ = [
    "FieldDefinition",
    "SectionDefinition",
    "FamilyDefinition",
    "DocumentSpec",
    "applicability_map",
]
