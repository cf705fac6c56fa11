"""Structural validator assembly.

Builds, per document kind, a runtime check equivalent to the wire schema's
nullability decisions. Records mirror the wire shape::

    {
        "id": "...",                          # document fields
        "metaGovernance": {                   # family relation
            "id": "...",                      # family fields
            "status": {"currentState": ...},  # section relation -> section fields
        },
    }

Omitted fields are ignored (present or not). Optional fields may be absent
or null. Required fields must be present, non-null and satisfy their
constraint. Every failing field is reported, not only the first one. Keys
the model does not know are ignored.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import best_match

from docschema.core.errors import FieldFailure, UnknownIdError, ValidationError
from docschema.core.model import (
    DocumentKind,
    FieldDefinition,
    document_field_qid,
    family_qid,
    field_qid,
    section_qid,
)
from docschema.core.registry import DocumentModel

from .base import ModelGenerator, family_required, require_model, section_required, visible_fields

logger = logging.getLogger(__name__)

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

FORMAT_CHECKER = FormatChecker(formats=())

# RFC 3339 date-time: full date, "T", full time with optional fraction, and a zone.
_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.\d+)?"
    r"(?:[Zz]|[+-](\d{2}):(\d{2}))",
    re.ASCII,
)


@FORMAT_CHECKER.checks("date-time", raises=ValueError)
def _is_datetime(instance: Any) -> bool:
    if not isinstance(instance, str):
        return True
    match = _RFC3339.fullmatch(instance)
    if match is None:
        return False
    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    if second > 60:
        return False
    # Leap seconds (":60") are valid RFC 3339 but not datetime values.
    datetime(year, month, day, hour, minute, min(second, 59))
    offset_hour, offset_minute = match.group(7), match.group(8)
    if offset_hour is not None and (int(offset_hour) > 23 or int(offset_minute) > 59):
        return False
    return True


_MISSING = object()


@dataclass(frozen=True)
class _FieldCheck:
    qualified_id: str
    name: str
    required: bool
    schema: Dict[str, Any]
    validator: Draft202012Validator = field(repr=False, compare=False)


@dataclass(frozen=True)
class _Container:
    """A family or section object inside the record."""

    qualified_id: str
    name: str
    required: bool
    fields: Tuple[_FieldCheck, ...]
    children: Tuple["_Container", ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one record: ``ok`` or a list of failures."""

    kind: DocumentKind
    record: Any
    errors: Tuple[FieldFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> Any:
        """Return the record, or raise ``ValidationError`` with every failure."""
        if self.errors:
            raise ValidationError(self.kind.value, self.errors)
        return self.record

    def __bool__(self) -> bool:
        return self.ok


def _nullable(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"anyOf": [schema, {"type": "null"}]}


class DocumentValidator:
    """Structural validator for one document kind."""

    def __init__(self, model: DocumentModel, kind: DocumentKind) -> None:
        self.model = require_model(model)
        self.kind = DocumentKind.parse(kind)
        self._required: Dict[str, bool] = {}
        self._fields = self._field_checks(self.model.document.fields, None, None)
        self._containers = tuple(self._family_container(fam) for fam in self.model.composition(self.kind))
        known = {ref.qualified_id for ref in self.model.iter_field_refs()}
        known.update(family_qid(f.id) for f in self.model.families)
        known.update(section_qid(s) for f in self.model.families for s in f.section_ids)
        self._known: FrozenSet[str] = frozenset(known)

    # ------------------------------------------------------------- assembly

    def _field_checks(
        self,
        fields: Any,
        family_id: Optional[int],
        section_id: Optional[str],
    ) -> Tuple[_FieldCheck, ...]:
        checks: List[_FieldCheck] = []
        for f in visible_fields(fields, self.kind):
            qid = document_field_qid(f.name) if family_id is None else field_qid(family_id, section_id, f.name)
            schema = f.constraint.to_json_schema(self.model.resolve_enum)
            required = f.is_required(self.kind)
            self._required[qid] = required
            checks.append(
                _FieldCheck(
                    qualified_id=qid,
                    name=f.name,
                    required=required,
                    schema=schema,
                    validator=Draft202012Validator(schema, format_checker=FORMAT_CHECKER),
                )
            )
        return tuple(checks)

    def _family_container(self, fam: Any) -> _Container:
        family_id = fam.family.id
        sections = []
        for section in fam.sections:
            required = section_required(section, self.kind)
            self._required[section_qid(section.id)] = required
            sections.append(
                _Container(
                    qualified_id=section_qid(section.id),
                    name=section.key,
                    required=required,
                    fields=self._field_checks(section.fields, family_id, section.id),
                )
            )
        required = family_required(fam, self.kind)
        self._required[family_qid(family_id)] = required
        return _Container(
            qualified_id=family_qid(family_id),
            name=fam.name,
            required=required,
            fields=self._field_checks(fam.family.fields, family_id, None),
            children=tuple(sections),
        )

    # --------------------------------------------------------------- queries

    def requires(self, qualified_id: str) -> bool:
        """Whether ``qualified_id`` must be present and non-null for this kind.

        Raises:
            UnknownIdError: ``qualified_id`` is not part of the model
        """
        if qualified_id not in self._known:
            raise UnknownIdError(f"Unknown qualified id '{qualified_id}'", offending_id=qualified_id)
        return self._required.get(qualified_id, False)

    def validate(self, record: Any) -> ValidationResult:
        """Check ``record`` and collect every failing field."""
        failures: List[FieldFailure] = []
        if not isinstance(record, Mapping):
            failures.append(FieldFailure(self.kind.value, "", f"{self.kind.value} record must be an object"))
        else:
            self._check_fields(record, self._fields, "", failures)
            for container in self._containers:
                self._check_container(record, container, "", failures)
        if failures:
            logger.debug("%s record failed validation on %d field(s)", self.kind.value, len(failures))
        return ValidationResult(kind=self.kind, record=record, errors=tuple(failures))

    def check(self, record: Any) -> Any:
        """Validate and return ``record``; raise ``ValidationError`` on failure."""
        return self.validate(record).unwrap()

    def _check_container(
        self,
        parent: Mapping[str, Any],
        container: _Container,
        prefix: str,
        failures: List[FieldFailure],
    ) -> None:
        path = f"{prefix}{container.name}"
        value = parent.get(container.name)
        if value is None:
            if not container.required:
                return
            # Report every required field below the missing object.
            value = {}
        elif not isinstance(value, Mapping):
            failures.append(FieldFailure(container.qualified_id, path, "must be an object"))
            return
        self._check_fields(value, container.fields, f"{path}.", failures)
        for child in container.children:
            self._check_container(value, child, f"{path}.", failures)

    def _check_fields(
        self,
        container: Mapping[str, Any],
        checks: Tuple[_FieldCheck, ...],
        prefix: str,
        failures: List[FieldFailure],
    ) -> None:
        for check in checks:
            path = f"{prefix}{check.name}"
            value = container.get(check.name, _MISSING)
            if value is _MISSING or value is None:
                if check.required:
                    failures.append(FieldFailure(check.qualified_id, path, "is required"))
                continue
            error = best_match(check.validator.iter_errors(value))
            if error is not None:
                where = "".join(f"[{p}]" for p in error.absolute_path)
                failures.append(FieldFailure(check.qualified_id, f"{path}{where}", error.message))

    # ------------------------------------------------------------ json schema

    def json_schema(self) -> Dict[str, Any]:
        """Full Draft 2020-12 schema for this kind, built from the same fragments."""
        schema = self._object_schema(self._fields, self._containers)
        schema = dict(
            {
                "$schema": JSON_SCHEMA_DIALECT,
                "$id": f"docschema/{self.kind.value}.schema.json",
                "title": self.kind.value,
            },
            **schema,
        )
        return schema

    def _object_schema(
        self,
        checks: Tuple[_FieldCheck, ...],
        containers: Tuple[_Container, ...],
    ) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        required: List[str] = []
        for check in checks:
            properties[check.name] = check.schema if check.required else _nullable(check.schema)
            if check.required:
                required.append(check.name)
        for container in containers:
            sub = self._object_schema(container.fields, container.children)
            properties[container.name] = sub if container.required else _nullable(sub)
            if container.required:
                required.append(container.name)
        schema: Dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return schema


class StructuralValidator:
    """Per-kind validators for every kind of the composition table."""

    def __init__(self, validators: Mapping[DocumentKind, DocumentValidator]) -> None:
        self._validators = dict(validators)

    @property
    def kinds(self) -> Tuple[DocumentKind, ...]:
        return tuple(self._validators)

    def for_kind(self, kind: Any) -> DocumentValidator:
        parsed = DocumentKind.parse(kind)
        try:
            return self._validators[parsed]
        except KeyError:
            raise UnknownIdError(f"No validator for document kind '{parsed.value}'", offending_id=parsed.value) from None

    def validate(self, kind: Any, record: Any) -> ValidationResult:
        return self.for_kind(kind).validate(record)

    def json_schemas(self) -> Dict[str, Dict[str, Any]]:
        return {kind.value: v.json_schema() for kind, v in self._validators.items()}


class StructuralValidatorAssembler(ModelGenerator):
    """Assemble a ``StructuralValidator`` from a validated model."""

    artifact = "validator"

    def assemble(self) -> StructuralValidator:
        validators = {kind: DocumentValidator(self.model, kind) for kind in self.model.kinds}
        logger.debug("Assembled validators for %d kinds", len(validators))
        return StructuralValidator(validators)

    def generate(self) -> StructuralValidator:
        return self.assemble()


__all__ = [
    "FORMAT_CHECKER",
    "ValidationResult",
    "DocumentValidator",
    "StructuralValidator",
    "StructuralValidatorAssembler",
]
