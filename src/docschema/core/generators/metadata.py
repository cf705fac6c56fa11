"""Documentation index extraction.

Produces a read-only index of the human and AI facing text attached to
every element of the model, keyed by qualified id (see
``docschema.core.model.ids``). The index is advisory only; the structural
validator never reads it.

Inheritance of advisory text:
    family -> section -> specialized section -> field

A field keeps its own text and fills the gaps from its section; a section
fills gaps from its base section, then from its family.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from docschema.core.errors import UnknownIdError
from docschema.core.model import (
    ALL_KINDS,
    DocumentKind,
    FamilyDefinition,
    FieldDefinition,
    Metadata,
    SectionDefinition,
    document_field_qid,
    family_qid,
    field_qid,
    section_qid,
)

from .base import ModelGenerator

logger = logging.getLogger(__name__)

# Text that flows down the model. Descriptions, examples and rules stay put.
INHERITED_KEYS = ("business_purpose", "usage_guidelines", "ai_instructions")


@dataclass(frozen=True)
class DocEntry:
    """Documentation for one element of the model."""

    qualified_id: str
    scope: str
    name: str
    metadata: Metadata
    label: str = ""
    parent: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"scope": self.scope, "name": self.name}
        if self.label:
            out["label"] = self.label
        if self.parent is not None:
            out["parent"] = self.parent
        out.update(self.details)
        out.update(self.metadata.to_dict())
        return out


class DocumentationIndex(Mapping):
    """Read-only mapping of qualified id to ``DocEntry``."""

    def __init__(self, entries: List[DocEntry]) -> None:
        self._entries: Dict[str, DocEntry] = {e.qualified_id: e for e in entries}

    def __getitem__(self, qualified_id: str) -> DocEntry:
        return self._entries[qualified_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, qualified_id: str) -> DocEntry:
        """Return the entry for ``qualified_id``.

        Raises:
            UnknownIdError: No element has this id
        """
        try:
            return self._entries[qualified_id]
        except KeyError:
            raise UnknownIdError(
                f"No documentation for '{qualified_id}'", offending_id=qualified_id
            ) from None

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {qid: entry.to_dict() for qid, entry in self._entries.items()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"


def _field_details(f: FieldDefinition) -> Dict[str, Any]:
    return {
        "type": f.wire.render(not f.nullable),
        "applicability": {kind.value: str(f.applicability[kind]) for kind in ALL_KINDS if kind in f.applicability},
    }


class MetadataExtractor(ModelGenerator):
    """Build the ``DocumentationIndex`` for a validated model."""

    artifact = "documentation"

    def extract(self) -> DocumentationIndex:
        entries: List[DocEntry] = []
        for kind in self.model.kinds:
            entries.append(self._kind_entry(kind))
        for f in self.model.document.fields:
            entries.append(
                DocEntry(
                    qualified_id=document_field_qid(f.name),
                    scope="field",
                    name=f.name,
                    label=f.label,
                    metadata=f.metadata,
                    details=_field_details(f),
                )
            )
        for family in self.model.families:
            entries.extend(self._family_entries(family))
        logger.debug("Documentation index: %d entries", len(entries))
        return DocumentationIndex(entries)

    def generate(self) -> DocumentationIndex:
        return self.extract()

    def _kind_entry(self, kind: DocumentKind) -> DocEntry:
        composed = self.model.composition(kind)
        return DocEntry(
            qualified_id=kind.value,
            scope="kind",
            name=kind.value,
            metadata=self.model.document.metadata_for(kind),
            details={
                "families": {
                    c.name: [s.id for s in c.sections] for c in composed
                },
            },
        )

    def _section_metadata(self, section: SectionDefinition, family: FamilyDefinition) -> Metadata:
        meta = section.metadata
        parent_id = section.parent_id
        while parent_id is not None:
            parent = self.model.section(parent_id)
            meta = meta.inherit(parent.metadata, INHERITED_KEYS)
            parent_id = parent.parent_id
        return meta.inherit(family.metadata, INHERITED_KEYS)

    def _family_entries(self, family: FamilyDefinition) -> List[DocEntry]:
        fid = family_qid(family.id)
        entries = [
            DocEntry(
                qualified_id=fid,
                scope="family",
                name=family.name,
                metadata=family.metadata,
                details={
                    "version": family.version,
                    "relation": family.relation_name,
                    "supported_kinds": [k.value for k in family.supported_kinds],
                    "sections": list(family.section_ids),
                },
            )
        ]
        for f in family.fields:
            entries.append(
                DocEntry(
                    qualified_id=field_qid(family.id, None, f.name),
                    scope="field",
                    name=f.name,
                    label=f.label,
                    parent=fid,
                    metadata=f.metadata.inherit(family.metadata, INHERITED_KEYS),
                    details=_field_details(f),
                )
            )
        for section_id in family.section_ids:
            section = self.model.section(section_id)
            section_meta = self._section_metadata(section, family)
            sid = section_qid(section_id)
            details: Dict[str, Any] = {"key": self.model.section_key(section_id)}
            if section.parent_id is not None:
                details["extends"] = section.parent_id
            entries.append(
                DocEntry(
                    qualified_id=sid,
                    scope="section",
                    name=section.name,
                    parent=fid,
                    metadata=section_meta,
                    details=details,
                )
            )
            for f in self.model.effective_fields(section_id):
                entries.append(
                    DocEntry(
                        qualified_id=field_qid(family.id, section_id, f.name),
                        scope="field",
                        name=f.name,
                        label=f.label,
                        parent=sid,
                        metadata=f.metadata.inherit(section_meta, INHERITED_KEYS),
                        details=_field_details(f),
                    )
                )
        return entries


__all__ = ["DocEntry", "DocumentationIndex", "MetadataExtractor", "INHERITED_KEYS"]
