"""Model registry: registration, lookups and the composition integrity pass.

The registry collects enum, section and family declarations plus the
document spec and composition table, then ``validate_composition`` checks
every invariant and hands out an immutable ``DocumentModel``. Checks run in
a fixed order that does not depend on registration order, so the first
reported violation is the same on every run:

1. enums by name
2. sections by natural id (inheritance, field declarations)
3. families by id (family fields, section membership, effective fields)
4. document-level fields
5. composition table, kinds and entries in declaration order
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from docschema.core.errors import (
    CompositionIntegrityError,
    DuplicateIdError,
    MissingApplicabilityError,
    RegistryFrozenError,
    UnknownIdError,
)
from docschema.core.model import (
    ALL_KINDS,
    CompositionTable,
    DocumentKind,
    DocumentSpec,
    EnumDefinition,
    FamilyDefinition,
    FieldDefinition,
    SectionDefinition,
)
from docschema.core.utils.text import natural_key

from .inheritance import ancestry, check_superset, effective_fields, relation_key
from .snapshot import _VALIDATED, ComposedFamily, ComposedSection, DocumentModel

logger = logging.getLogger(__name__)

Registrable = Union[EnumDefinition, SectionDefinition, FamilyDefinition, FieldDefinition, DocumentSpec, CompositionTable]

_SECTION_ID_RE = re.compile(r"^\d+(\.\d+)+$")
_VERSION_RE = re.compile(r"^\d+\.\d+(\.\d+)?$")
_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Relation fields generated by the wire schema; declarations may not use them.
RESERVED_SECTION_FIELDS = ("family",)
RESERVED_FAMILY_FIELDS = ("document",)


class ModelRegistry:
    """Collects declarations and validates them into a ``DocumentModel``.

    Example:
        registry = ModelRegistry()
        for item in declarations:
            registry.register(item)
        model = registry.validate_composition(table)
    """

    def __init__(self) -> None:
        self._enums: Dict[str, EnumDefinition] = {}
        self._sections: Dict[str, SectionDefinition] = {}
        self._families: Dict[int, FamilyDefinition] = {}
        self._document: Optional[DocumentSpec] = None
        self._table: Optional[CompositionTable] = None
        self._model: Optional[DocumentModel] = None

    @classmethod
    def load(cls, model_dir: Optional[Path] = None) -> "ModelRegistry":
        """Load declarations from a model directory (bundled model by default)."""
        from .loader import load_declarations

        registry = cls()
        for item in load_declarations(model_dir):
            registry.register(item)
        return registry

    # ----------------------------------------------------------- registration

    @property
    def is_validated(self) -> bool:
        return self._model is not None

    def register(self, item: Registrable, *, section_id: Optional[str] = None) -> None:
        """Register one declaration.

        A ``FieldDefinition`` is appended to the already registered section
        named by ``section_id``.

        Raises:
            DuplicateIdError: The id is already taken in its namespace
            MissingApplicabilityError: A field leaves a document kind undeclared
            UnknownIdError: ``section_id`` names an unregistered section
            RegistryFrozenError: The registry was already validated
        """
        if self._model is not None:
            raise RegistryFrozenError("Registry is validated and read-only")

        if isinstance(item, FieldDefinition):
            self._register_field(item, section_id)
        elif isinstance(item, SectionDefinition):
            self._register_section(item)
        elif isinstance(item, FamilyDefinition):
            self._register_family(item)
        elif isinstance(item, EnumDefinition):
            if item.name in self._enums:
                raise DuplicateIdError(f"Duplicate enum '{item.name}'", offending_id=item.name)
            self._enums[item.name] = item
        elif isinstance(item, DocumentSpec):
            if self._document is not None:
                raise DuplicateIdError("Document spec registered twice", offending_id="document")
            self._check_fields("document", item.fields)
            self._document = item
        elif isinstance(item, CompositionTable):
            if self._table is not None:
                raise DuplicateIdError("Composition table registered twice", offending_id="composition")
            self._table = item
        else:
            raise TypeError(f"Cannot register {type(item).__name__}")

    def _register_section(self, section: SectionDefinition) -> None:
        if section.id in self._sections:
            raise DuplicateIdError(f"Duplicate section id '{section.id}'", offending_id=section.id)
        self._check_fields(section.id, section.fields)
        self._sections[section.id] = section
        logger.debug("Registered section %s (%d fields)", section.id, len(section.fields))

    def _register_family(self, family: FamilyDefinition) -> None:
        if family.id in self._families:
            raise DuplicateIdError(f"Duplicate family id '{family.id}'", offending_id=str(family.id))
        self._check_fields(str(family.id), family.fields)
        self._check_fields(f"{family.id} (section fields)", family.section_fields)
        self._families[family.id] = family
        logger.debug("Registered family %s '%s'", family.id, family.name)

    def _register_field(self, field: FieldDefinition, section_id: Optional[str]) -> None:
        if section_id is None:
            raise TypeError("Registering a field requires section_id")
        section = self.resolve_section(section_id)
        self._check_fields(section_id, section.fields + (field,))
        self._sections[section_id] = section.with_field(field)

    @staticmethod
    def _check_fields(owner: str, fields: Sequence[FieldDefinition]) -> None:
        seen: set = set()
        for f in fields:
            if f.name in seen:
                raise DuplicateIdError(
                    f"Duplicate field '{f.name}' in '{owner}'", offending_id=f"{owner}.{f.name}"
                )
            seen.add(f.name)
            missing = f.missing_kinds()
            if missing:
                names = ", ".join(k.value for k in missing)
                raise MissingApplicabilityError(
                    f"Field '{owner}.{f.name}' has no applicability for: {names}",
                    offending_id=f"{owner}.{f.name}",
                )

    # ---------------------------------------------------------------- lookups

    def resolve(self, ref: Union[int, str]) -> Union[SectionDefinition, FamilyDefinition]:
        """Resolve a family id (``1`` or ``"1"``) or a dotted section id (``"1.1"``)."""
        if isinstance(ref, int) or "." not in str(ref):
            return self.resolve_family(ref)
        return self.resolve_section(str(ref))

    def resolve_section(self, section_id: str) -> SectionDefinition:
        try:
            return self._sections[str(section_id)]
        except KeyError:
            raise UnknownIdError(f"Unknown section id '{section_id}'", offending_id=str(section_id)) from None

    def resolve_family(self, family_id: Union[int, str]) -> FamilyDefinition:
        try:
            return self._families[int(family_id)]
        except (KeyError, ValueError):
            raise UnknownIdError(f"Unknown family id '{family_id}'", offending_id=str(family_id)) from None

    def resolve_enum(self, name: str) -> EnumDefinition:
        try:
            return self._enums[name]
        except KeyError:
            raise UnknownIdError(f"Unknown enum '{name}'", offending_id=name) from None

    # ------------------------------------------------------------- validation

    def validate(self) -> DocumentModel:
        """Validate against the registered composition table."""
        if self._table is None:
            raise CompositionIntegrityError("No composition table registered", offending_id="composition")
        return self.validate_composition(self._table)

    def validate_composition(
        self,
        table: CompositionTable,
        document: Optional[DocumentSpec] = None,
    ) -> DocumentModel:
        """Check every model invariant and return the validated snapshot.

        Raises the first violation found (see module docstring for the order).
        Once this succeeds the registry is frozen.
        """
        if self._model is not None and table == self._model.table and document is None:
            return self._model

        spec = document or self._document or DocumentSpec()
        if document is not None:
            self._check_fields("document", document.fields)

        for name in sorted(self._enums):
            self._validate_enum(self._enums[name])

        for section_id in sorted(self._sections, key=natural_key):
            self._validate_section(self._sections[section_id])

        effective: Dict[str, Tuple[FieldDefinition, ...]] = {}
        keys: Dict[str, str] = {}
        owner: Dict[str, int] = {}
        for family_id in sorted(self._families):
            family = self._families[family_id]
            self._validate_family(family, owner)
            for section_id in family.section_ids:
                section = self._sections[section_id]
                effective[section_id] = effective_fields(section, self._sections, family)
                keys[section_id] = relation_key(section, self._sections)
            for section_id in family.section_ids:
                parent_id = self._sections[section_id].parent_id
                if parent_id is not None:
                    base = effective.get(parent_id) or effective_fields(
                        self._sections[parent_id], self._sections, family
                    )
                    check_superset(section_id, base, effective[section_id])

        for f in spec.fields:
            self._validate_field(f"document.{f.name}", f)

        composition = self._validate_table(table, spec, keys, effective)

        model = DocumentModel(
            enums=self._enums,
            sections=self._sections,
            families=self._families,
            effective=effective,
            keys=keys,
            table=table,
            composition=composition,
            document=spec,
            token=_VALIDATED,
        )
        self._model = model
        logger.info(
            "Validated model: %d families, %d sections, %d kinds",
            len(self._families),
            len(self._sections),
            len(table.kinds),
        )
        return model

    def _validate_enum(self, enum: EnumDefinition) -> None:
        if not _NAME_RE.match(enum.name):
            raise CompositionIntegrityError(f"Invalid enum name '{enum.name}'", offending_id=enum.name)
        if not enum.values:
            raise CompositionIntegrityError(f"Enum '{enum.name}' has no values", offending_id=enum.name)
        if len(set(enum.values)) != len(enum.values):
            raise CompositionIntegrityError(f"Enum '{enum.name}' repeats a value", offending_id=enum.name)

    def _validate_section(self, section: SectionDefinition) -> None:
        if not _SECTION_ID_RE.match(section.id):
            raise CompositionIntegrityError(
                f"Section id '{section.id}' is not a dotted numeric id", offending_id=section.id
            )
        chain = ancestry(section, self._sections)
        if section.parent_id is not None and chain[0].family_id != section.family_id:
            raise CompositionIntegrityError(
                f"Section '{section.id}' extends '{section.parent_id}' from another family",
                offending_id=section.id,
            )
        for f in section.fields:
            if f.name in RESERVED_SECTION_FIELDS:
                raise CompositionIntegrityError(
                    f"Field name '{f.name}' is reserved in section '{section.id}'",
                    offending_id=f"{section.id}.{f.name}",
                )
            self._validate_field(f"{section.id}.{f.name}", f)

    def _validate_family(self, family: FamilyDefinition, owner: Dict[str, int]) -> None:
        fid = str(family.id)
        if not _VERSION_RE.match(family.version):
            raise CompositionIntegrityError(
                f"Family {fid} version '{family.version}' is not a semantic version", offending_id=fid
            )
        for f in family.fields:
            if f.name in RESERVED_FAMILY_FIELDS:
                raise CompositionIntegrityError(
                    f"Field name '{f.name}' is reserved in family {fid}", offending_id=f"{fid}.{f.name}"
                )
            self._validate_field(f"{fid}.{f.name}", f)
        for f in family.section_fields:
            if f.name in RESERVED_SECTION_FIELDS:
                raise CompositionIntegrityError(
                    f"Field name '{f.name}' is reserved in family {fid} section fields",
                    offending_id=f"{fid}.{f.name}",
                )
            self._validate_field(f"{fid}.{f.name}", f)

        for section_id in family.section_ids:
            if section_id not in self._sections:
                raise UnknownIdError(
                    f"Family {fid} lists unknown section '{section_id}'", offending_id=section_id
                )
            if self._sections[section_id].family_id != family.id:
                raise CompositionIntegrityError(
                    f"Section '{section_id}' does not belong to family {fid} (id prefix mismatch)",
                    offending_id=section_id,
                )
            if section_id in owner:
                raise CompositionIntegrityError(
                    f"Section '{section_id}' is listed twice", offending_id=section_id
                )
            owner[section_id] = family.id

    def _validate_field(self, qualified: str, f: FieldDefinition) -> None:
        if not f.wire.is_scalar and f.wire.name not in self._enums:
            raise UnknownIdError(
                f"Field '{qualified}' references unknown type '{f.wire.name}'", offending_id=f.wire.name
            )
        for enum_name in f.constraint.enum_names():
            if enum_name not in self._enums:
                raise UnknownIdError(
                    f"Field '{qualified}' references unknown enum '{enum_name}'", offending_id=enum_name
                )
        if not f.wire.accepts(f.constraint):
            raise CompositionIntegrityError(
                f"Field '{qualified}' constraint '{f.constraint.kind}' does not fit wire type "
                f"'{f.wire.render(False)}'",
                offending_id=qualified,
            )
        if f.wire.nullable is not None and f.wire.nullable != f.derived_nullable:
            expected = "nullable" if f.derived_nullable else "non-nullable"
            raise CompositionIntegrityError(
                f"Field '{qualified}' declares nullable={str(f.wire.nullable).lower()} but its "
                f"applicability makes it {expected}",
                offending_id=qualified,
            )

    def _validate_table(
        self,
        table: CompositionTable,
        spec: DocumentSpec,
        keys: Dict[str, str],
        effective: Dict[str, Tuple[FieldDefinition, ...]],
    ) -> Dict[DocumentKind, Tuple[ComposedFamily, ...]]:
        for kind in ALL_KINDS:
            if kind not in table:
                raise CompositionIntegrityError(
                    f"Composition table has no entry for document kind '{kind.value}'",
                    offending_id=kind.value,
                )

        document_names = {f.name for f in spec.fields}
        composition: Dict[DocumentKind, Tuple[ComposedFamily, ...]] = {}
        for kind, entries in table.items():
            used_sections: set = set()
            relations: set = set()
            families_seen: set = set()
            composed: List[ComposedFamily] = []
            for entry in entries:
                family = self.resolve_family(entry.family_id)
                # Generated type names carry only family and kind.
                if family.id in families_seen:
                    raise CompositionIntegrityError(
                        f"{kind.value}: family {family.id} is listed twice", offending_id=str(family.id)
                    )
                families_seen.add(family.id)
                name = entry.name or family.relation_name
                if name in relations or name in document_names:
                    raise CompositionIntegrityError(
                        f"{kind.value}: relation name '{name}' is used twice", offending_id=name
                    )
                relations.add(name)
                if not family.supports(kind):
                    raise CompositionIntegrityError(
                        f"{kind.value}: family {family.id} does not support this document kind",
                        offending_id=str(family.id),
                    )
                section_keys: set = {f.name for f in family.fields}
                sections: List[ComposedSection] = []
                for section_id in entry.sections_used:
                    section = self.resolve_section(section_id)
                    if section_id not in family.section_ids:
                        raise CompositionIntegrityError(
                            f"{kind.value}: section '{section_id}' is not part of family {family.id}",
                            offending_id=section_id,
                        )
                    if section_id in used_sections:
                        raise CompositionIntegrityError(
                            f"{kind.value}: section '{section_id}' is used twice", offending_id=section_id
                        )
                    used_sections.add(section_id)
                    key = keys[section_id]
                    if key in section_keys:
                        raise CompositionIntegrityError(
                            f"{kind.value}: relation '{key}' of section '{section_id}' collides in "
                            f"family {family.id}",
                            offending_id=section_id,
                        )
                    section_keys.add(key)
                    sections.append(ComposedSection(section=section, key=key, fields=effective[section_id]))
                composed.append(ComposedFamily(name=name, family=family, sections=tuple(sections)))
            composition[kind] = tuple(composed)
        return composition


__all__ = ["ModelRegistry", "RESERVED_SECTION_FIELDS", "RESERVED_FAMILY_FIELDS"]
