"""Descriptive metadata attached to fields, sections, families and kinds.

Metadata is advisory documentation only. It never carries validation
constraints and is never consulted by the structural validator.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

TEXT_KEYS: Tuple[str, ...] = (
    "description",
    "business_purpose",
)
LIST_KEYS: Tuple[str, ...] = (
    "validation_rules",
    "usage_guidelines",
    "examples",
    "ai_instructions",
    "questions",
)


@dataclass(frozen=True)
class Metadata:
    """Human and AI facing text for one element of the model.

    Attributes:
        description: One-line description
        business_purpose: Why the element exists
        validation_rules: Prose description of the rules (documentation only)
        usage_guidelines: How authors should fill the element
        examples: Illustrative values or payloads
        ai_instructions: Hints for AI authoring assistants
        questions: Questions the element answers
    """

    description: str = ""
    business_purpose: str = ""
    validation_rules: Tuple[str, ...] = ()
    usage_guidelines: Tuple[str, ...] = ()
    examples: Tuple[Any, ...] = ()
    ai_instructions: Tuple[str, ...] = ()
    questions: Tuple[str, ...] = ()

    @classmethod
    def from_declaration(cls, data: Mapping[str, Any]) -> "Metadata":
        """Build metadata from the descriptive keys of a declaration mapping."""
        values: Dict[str, Any] = {}
        for key in TEXT_KEYS:
            if data.get(key) is not None:
                values[key] = str(data[key]).strip()
        for key in LIST_KEYS:
            raw = data.get(key)
            if raw is None:
                continue
            values[key] = tuple(raw) if isinstance(raw, (list, tuple)) else (raw,)
        return cls(**values)

    def inherit(self, fallback: "Metadata", keys: Optional[Iterable[str]] = None) -> "Metadata":
        """Return a copy where empty attributes are taken from ``fallback``.

        Only ``keys`` are inherited when given; otherwise every attribute is.
        """
        names = set(keys) if keys is not None else {f.name for f in fields(self)}
        updates = {}
        for f in fields(self):
            if f.name in names and not getattr(self, f.name) and getattr(fallback, f.name):
                updates[f.name] = getattr(fallback, f.name)
        return replace(self, **updates) if updates else self

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = list(value) if isinstance(value, tuple) else value
        return out


__all__ = ["Metadata", "TEXT_KEYS", "LIST_KEYS"]
