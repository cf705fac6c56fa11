"""Document kinds and per-kind applicability levels."""
from __future__ import annotations

from enum import Enum
from typing import Tuple


class DocumentKind(str, Enum):
    """The five document categories a composed schema can describe.

    Declaration order is meaningful: it is the emission order of every
    generated artifact.
    """

    PLAN = "Plan"
    TASK = "Task"
    PROJECT = "Project"
    MODULE = "Module"
    FEATURE = "Feature"

    @classmethod
    def parse(cls, value: "str | DocumentKind") -> "DocumentKind":
        """Accept a kind, its value ("Task") or its name in any case ("task")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for kind in cls:
            if text == kind.value or text.upper() == kind.name:
                return kind
        raise ValueError(f"Unknown document kind: {value!r}")

    def __str__(self) -> str:
        return self.value


ALL_KINDS: Tuple[DocumentKind, ...] = tuple(DocumentKind)


class Applicability(str, Enum):
    """How a field applies to one document kind."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    OMITTED = "omitted"

    @classmethod
    def parse(cls, value: "str | Applicability") -> "Applicability":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown applicability: {value!r}") from None

    def __str__(self) -> str:
        return self.value


__all__ = ["DocumentKind", "ALL_KINDS", "Applicability"]
