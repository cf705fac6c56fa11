"""Base class for the artifact generators.

Every generator is a pure function of a validated ``DocumentModel``: it
reads the snapshot, shares no mutable state and performs no I/O, so several
generators can run side by side on the same model.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

from docschema.core.errors import UnvalidatedModelError
from docschema.core.model import DocumentKind, FieldDefinition
from docschema.core.registry import ComposedFamily, ComposedSection, DocumentModel


def require_model(model: Any) -> DocumentModel:
    """Return ``model`` if it is a validated snapshot, else raise."""
    if not isinstance(model, DocumentModel):
        raise UnvalidatedModelError(
            f"Generators accept a validated DocumentModel, got {type(model).__name__}; "
            "call ModelRegistry.validate_composition() first"
        )
    return model


def visible_fields(fields: Iterable[FieldDefinition], kind: DocumentKind) -> Sequence[FieldDefinition]:
    """Fields of a block that exist on ``kind`` (omitted ones dropped), in order."""
    return [f for f in fields if not f.is_omitted(kind)]


def section_required(section: ComposedSection, kind: DocumentKind) -> bool:
    """A section relation is mandatory when the section holds a required field."""
    return any(f.is_required(kind) for f in section.fields)


def family_required(family: ComposedFamily, kind: DocumentKind) -> bool:
    """A family relation is mandatory when anything below it is required."""
    if any(f.is_required(kind) for f in family.family.fields):
        return True
    return any(section_required(s, kind) for s in family.sections)


class ModelGenerator(ABC):
    """Base class for generators over a validated document model.

    Subclasses implement ``generate()`` and return an in-memory artifact;
    writing it to disk is the caller's job.
    """

    #: Short name used in logs and the generation summary.
    artifact: str = ""

    def __init__(self, model: DocumentModel) -> None:
        self.model = require_model(model)

    @abstractmethod
    def generate(self) -> Any:
        """Build the artifact from the model."""
        ...


__all__ = [
    "ModelGenerator",
    "require_model",
    "visible_fields",
    "section_required",
    "family_required",
]
