"""GraphQL wire schema generator.

For each document kind, in composition table order, emits:

- ``interface _Document_<Kind>_``: document fields plus one relation per family
- ``type <Kind> implements _Document_<Kind>_``: same fields, relations
  annotated ``@hasInverse(field: document)``
- per family: ``type _Family_<id>_<Name>_<Kind>_`` with family fields, one
  relation per section (``@hasInverse(field: family)``) and ``document``
- per section: ``type _Section_<id>_<Name>_<Kind>_`` with the effective
  fields and a ``family`` back reference

Fields omitted for a kind are skipped; fields required for it are non-null.
The text carries no timestamps, so equal models give byte-identical output.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from docschema.core.errors import UnknownIdError
from docschema.core.model import (
    DocumentKind,
    FieldDefinition,
    document_field_qid,
    family_qid,
    field_qid,
    section_qid,
)
from docschema.core.registry import ComposedFamily, ComposedSection
from docschema.core.utils.text import single_line

from .base import ModelGenerator, family_required, section_required, visible_fields

logger = logging.getLogger(__name__)

HEADER = "# Generated by docschema. Do not edit by hand."
INDENT = "  "


@dataclass(frozen=True)
class SchemaDependency:
    """One edge of the generated type graph."""

    source: str
    target: str
    relationship: str
    field: str


@dataclass(frozen=True)
class WireSchema:
    """Generated wire schema text plus the decisions behind it."""

    text: str
    type_names: Tuple[str, ...]
    dependencies: Tuple[SchemaDependency, ...]
    non_null: Mapping[Tuple[str, DocumentKind], bool] = field(repr=False, default_factory=dict)
    known_ids: FrozenSet[str] = field(repr=False, default_factory=frozenset)

    def is_non_nullable(self, qualified_id: str, kind: DocumentKind) -> bool:
        """Whether the declaration for ``qualified_id`` on ``kind`` is non-null.

        Ids that exist in the model but are not emitted for ``kind`` (omitted
        fields, sections the kind does not use) are reported as nullable.

        Raises:
            UnknownIdError: ``qualified_id`` is not part of the model
        """
        if qualified_id not in self.known_ids:
            raise UnknownIdError(f"Unknown qualified id '{qualified_id}'", offending_id=qualified_id)
        return self.non_null.get((qualified_id, DocumentKind.parse(kind)), False)

    def dependencies_of(self, type_name: str) -> Tuple[SchemaDependency, ...]:
        return tuple(d for d in self.dependencies if d.source == type_name)


def document_interface_name(kind: DocumentKind) -> str:
    return f"_Document_{kind.value}_"


def family_type_name(family: ComposedFamily, kind: DocumentKind) -> str:
    return f"_Family_{family.family.type_stem}_{kind.value}_"


def section_type_name(section: ComposedSection, kind: DocumentKind) -> str:
    return f"_Section_{section.section.type_stem}_{kind.value}_"


class WireSchemaGenerator(ModelGenerator):
    """Emit the GraphQL schema consumed by the persistence service."""

    artifact = "wire_schema"

    def generate(self) -> WireSchema:
        self._type_names: List[str] = []
        self._edges: List[SchemaDependency] = []
        self._non_null: Dict[Tuple[str, DocumentKind], bool] = {}

        body: List[str] = []
        for kind in self.model.kinds:
            body.extend(self._kind_block(kind))

        head = [HEADER, "", "scalar DateTime", ""]
        enum_names = self._enum_order()
        for enum_name in enum_names:
            enum = self.model.resolve_enum(enum_name)
            if enum.description:
                head.append(f"# {single_line(enum.description)}")
            head.append(f"enum {enum.name} {{")
            head.extend(f"{INDENT}{value}" for value in enum.values)
            head.extend(["}", ""])

        text = "\n".join(head + body).rstrip("\n") + "\n"
        known = {ref.qualified_id for ref in self.model.iter_field_refs()}
        known.update(family_qid(f.id) for f in self.model.families)
        known.update(section_qid(s) for f in self.model.families for s in f.section_ids)

        logger.debug("Wire schema: %d types, %d edges", len(self._type_names), len(self._edges))
        return WireSchema(
            text=text,
            type_names=tuple(enum_names) + tuple(self._type_names),
            dependencies=tuple(self._edges),
            non_null=dict(self._non_null),
            known_ids=frozenset(known),
        )

    # ------------------------------------------------------------------ blocks

    def _enum_order(self) -> List[str]:
        """Enums in first-use order, unused ones last by name."""
        seen: List[str] = []

        def visit(fields: Sequence[FieldDefinition]) -> None:
            for f in fields:
                if f.wire.name in self.model.enums and f.wire.name not in seen:
                    seen.append(f.wire.name)

        for kind in self.model.kinds:
            visit(visible_fields(self.model.document.fields, kind))
            for composed in self.model.composition(kind):
                visit(visible_fields(composed.family.fields, kind))
                for section in composed.sections:
                    visit(visible_fields(section.fields, kind))
        return seen + sorted(n for n in self.model.enums if n not in seen)

    def _kind_block(self, kind: DocumentKind) -> List[str]:
        families = self.model.composition(kind)
        interface = document_interface_name(kind)
        lines = [f"# ---- {kind.value} ----"]
        description = self.model.document.metadata_for(kind).description
        if description:
            lines.append(f"# {single_line(description)}")

        doc_fields = visible_fields(self.model.document.fields, kind)
        for f in doc_fields:
            self._non_null[(document_field_qid(f.name), kind)] = f.is_required(kind)
        relations = [(fam, family_type_name(fam, kind), family_required(fam, kind)) for fam in families]
        for fam, _, required in relations:
            self._non_null[(family_qid(fam.family.id), kind)] = required

        for type_line, annotate in (
            (f"interface {interface} {{", False),
            (f"type {kind.value} implements {interface} {{", True),
        ):
            lines.append(type_line)
            lines.extend(self._field_lines(doc_fields, kind, source=kind.value if annotate else None))
            for fam, type_name, required in relations:
                lines.extend(self._comment(fam.family.metadata.description))
                suffix = " @hasInverse(field: document)" if annotate else ""
                lines.append(f"{INDENT}{fam.name}: {type_name}{'!' if required else ''}{suffix}")
            lines.extend(["}", ""])

        self._type_names.extend([interface, kind.value])
        for fam, type_name, _ in relations:
            self._edge(kind.value, type_name, "hasInverse", fam.name)
        for fam, type_name, _ in relations:
            lines.extend(self._family_block(fam, type_name, kind))
        return lines

    def _family_block(self, fam: ComposedFamily, type_name: str, kind: DocumentKind) -> List[str]:
        lines = self._comment(fam.family.metadata.description, indent="")
        lines.append(f"type {type_name} {{")
        fam_fields = visible_fields(fam.family.fields, kind)
        for f in fam_fields:
            self._non_null[(field_qid(fam.family.id, None, f.name), kind)] = f.is_required(kind)
        lines.extend(self._field_lines(fam_fields, kind, source=type_name))

        section_types = []
        for section in fam.sections:
            sec_type = section_type_name(section, kind)
            required = section_required(section, kind)
            self._non_null[(section_qid(section.id), kind)] = required
            lines.extend(self._comment(section.section.metadata.description))
            lines.append(f"{INDENT}{section.key}: {sec_type}{'!' if required else ''} @hasInverse(field: family)")
            self._edge(type_name, sec_type, "hasInverse", section.key)
            section_types.append((section, sec_type))

        lines.append(f"{INDENT}document: {kind.value}!")
        self._edge(type_name, kind.value, "direct", "document")
        lines.extend(["}", ""])
        self._type_names.append(type_name)

        for section, sec_type in section_types:
            lines.extend(self._section_block(fam, section, sec_type, type_name, kind))
        return lines

    def _section_block(
        self,
        fam: ComposedFamily,
        section: ComposedSection,
        type_name: str,
        family_type: str,
        kind: DocumentKind,
    ) -> List[str]:
        lines = self._comment(section.section.metadata.description, indent="")
        lines.append(f"type {type_name} {{")
        fields = visible_fields(section.fields, kind)
        for f in fields:
            self._non_null[(field_qid(fam.family.id, section.id, f.name), kind)] = f.is_required(kind)
        lines.extend(self._field_lines(fields, kind, source=type_name))
        lines.append(f"{INDENT}family: {family_type}!")
        self._edge(type_name, family_type, "direct", "family")
        lines.extend(["}", ""])
        self._type_names.append(type_name)
        return lines

    # ----------------------------------------------------------------- helpers

    def _field_lines(
        self,
        fields: Sequence[FieldDefinition],
        kind: DocumentKind,
        source: Optional[str] = None,
    ) -> List[str]:
        lines: List[str] = []
        for f in fields:
            lines.extend(self._comment(f.metadata.description))
            lines.append(f"{INDENT}{f.name}: {f.wire.render(f.is_required(kind))}")
            if source is not None and f.wire.name in self.model.enums:
                self._edge(source, f.wire.name, "direct", f.name)
        return lines

    def _comment(self, text: str, indent: str = INDENT) -> List[str]:
        return [f"{indent}# {single_line(text)}"] if text else []

    def _edge(self, source: str, target: str, relationship: str, field_name: str) -> None:
        self._edges.append(SchemaDependency(source, target, relationship, field_name))


__all__ = [
    "WireSchema",
    "WireSchemaGenerator",
    "SchemaDependency",
    "document_interface_name",
    "family_type_name",
    "section_type_name",
]
