"""Section inheritance rules.

Effective section fields are the fold of these layers, in order:

    family.section_fields -> base sections (root first) -> section.fields

A later layer may override a field by name: the override's constraint,
applicability and metadata win, but the field keeps the position where it
first appeared. Fields new to a layer are appended at the end. A layer may
never change an inherited field's wire type, and nothing is ever removed:
an override may only narrow applicability (optional to required) for the
kinds the inherited field already appears on.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from docschema.core.errors import CompositionIntegrityError, UnknownIdError
from docschema.core.model import (
    ALL_KINDS,
    Applicability,
    FamilyDefinition,
    FieldDefinition,
    SectionDefinition,
)
from docschema.core.utils.text import camel_case


def ancestry(
    section: SectionDefinition,
    sections: Mapping[str, SectionDefinition],
) -> Tuple[SectionDefinition, ...]:
    """Return the inheritance chain of ``section``, root first, itself last.

    Raises:
        UnknownIdError: A base section is not registered
        CompositionIntegrityError: The chain is cyclic
    """
    chain: List[SectionDefinition] = [section]
    seen = {section.id}
    current = section
    while current.parent_id is not None:
        parent = sections.get(current.parent_id)
        if parent is None:
            raise UnknownIdError(
                f"Section '{current.id}' extends unknown base section '{current.parent_id}'",
                offending_id=current.parent_id,
            )
        if parent.id in seen:
            raise CompositionIntegrityError(
                f"Section '{section.id}' has a cyclic inheritance chain through '{parent.id}'",
                offending_id=section.id,
            )
        seen.add(parent.id)
        chain.append(parent)
        current = parent
    return tuple(reversed(chain))


def fold_layers(layers: Iterable[Tuple[str, Sequence[FieldDefinition]]]) -> Tuple[FieldDefinition, ...]:
    """Fold ``(owner, fields)`` layers into one ordered field tuple.

    Raises:
        CompositionIntegrityError: A layer retypes an inherited field or
            widens its applicability
    """
    order: List[str] = []
    by_name: Dict[str, FieldDefinition] = {}
    origin: Dict[str, str] = {}
    for owner, layer in layers:
        for f in layer:
            inherited = by_name.get(f.name)
            if inherited is None:
                order.append(f.name)
                origin[f.name] = owner
            else:
                if (inherited.wire.name, inherited.wire.is_list) != (f.wire.name, f.wire.is_list):
                    raise CompositionIntegrityError(
                        f"Section '{owner}' retypes field '{f.name}' inherited from '{origin[f.name]}' "
                        f"({inherited.wire.render(False)} -> {f.wire.render(False)})",
                        offending_id=f"{owner}.{f.name}",
                    )
                check_narrowing(owner, inherited, f, origin[f.name])
            by_name[f.name] = f
    return tuple(by_name[name] for name in order)


def check_narrowing(owner: str, inherited: FieldDefinition, override: FieldDefinition, source: str) -> None:
    """Check that ``override`` only narrows the applicability of ``inherited``.

    Per kind, an optional field may become required. A field the base
    includes may not become omitted, and a required one may not relax to
    optional. Kinds the base omits are free.

    Raises:
        CompositionIntegrityError: The override widens or removes the field
    """
    for kind in ALL_KINDS:
        before = inherited.applicability.get(kind, Applicability.OMITTED)
        after = override.applicability.get(kind, Applicability.OMITTED)
        if before is Applicability.OMITTED or after is before:
            continue
        if before is Applicability.OPTIONAL and after is Applicability.REQUIRED:
            continue
        raise CompositionIntegrityError(
            f"Section '{owner}' changes field '{override.name}' inherited from '{source}' "
            f"from {before} to {after} for {kind.value}",
            offending_id=f"{owner}.{override.name}",
        )


def effective_fields(
    section: SectionDefinition,
    sections: Mapping[str, SectionDefinition],
    family: Optional[FamilyDefinition] = None,
) -> Tuple[FieldDefinition, ...]:
    """Effective, ordered fields of ``section`` after applying inheritance."""
    layers: List[Tuple[str, Sequence[FieldDefinition]]] = []
    if family is not None and family.section_fields:
        layers.append((f"family {family.id}", family.section_fields))
    layers.extend((s.id, s.fields) for s in ancestry(section, sections))
    return fold_layers(layers)


def check_superset(
    section_id: str,
    base_fields: Sequence[FieldDefinition],
    derived_fields: Sequence[FieldDefinition],
) -> None:
    """Check that a specialization keeps every base field, in base order.

    Raises:
        CompositionIntegrityError: A base field is missing or reordered
    """
    derived_names = [f.name for f in derived_fields]
    positions = {name: i for i, name in enumerate(derived_names)}
    last = -1
    for f in base_fields:
        pos = positions.get(f.name)
        if pos is None:
            raise CompositionIntegrityError(
                f"Section '{section_id}' drops inherited field '{f.name}'",
                offending_id=f"{section_id}.{f.name}",
            )
        if pos < last:
            raise CompositionIntegrityError(
                f"Section '{section_id}' reorders inherited field '{f.name}'",
                offending_id=f"{section_id}.{f.name}",
            )
        last = pos


def relation_key(section: SectionDefinition, sections: Mapping[str, SectionDefinition]) -> str:
    """Relation field name of a section: explicit key, base key, or camelCase name."""
    for s in reversed(ancestry(section, sections)):
        if s.key:
            return s.key
    root = ancestry(section, sections)[0]
    return camel_case(root.name)


__all__ = [
    "ancestry",
    "fold_layers",
    "check_narrowing",
    "effective_fields",
    "check_superset",
    "relation_key",
]
