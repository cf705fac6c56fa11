"""Error classes for the document model compiler.

Model definition errors are raised while loading or validating declarations
and abort the whole generation run. ``ValidationError`` is raised per
candidate record and is recoverable by the caller.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


class ModelDefinitionError(Exception):
    """Raised when the declarative model is inconsistent."""

    def __init__(self, message: str, offending_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.offending_id = offending_id


class DuplicateIdError(ModelDefinitionError):
    """Raised when an id is registered twice within its namespace."""
    pass


class MissingApplicabilityError(ModelDefinitionError):
    """Raised when a field does not declare applicability for every kind."""
    pass


class UnknownIdError(ModelDefinitionError, LookupError):
    """Raised when a reference points to an id that is not registered."""
    pass


class CompositionIntegrityError(ModelDefinitionError):
    """Raised when the composition table or inheritance rules are violated."""
    pass


class DeclarationError(ModelDefinitionError):
    """Raised when a declaration source does not match its schema."""

    def __init__(self, message: str, source: Optional[str] = None, problems: Sequence[str] = ()) -> None:
        super().__init__(message, offending_id=source)
        self.source = source
        self.problems = list(problems)


class RegistryFrozenError(RuntimeError):
    """Raised when registering into a registry that was already validated."""
    pass


class UnvalidatedModelError(RuntimeError):
    """Raised when a generator receives something other than a validated model."""
    pass


class ConfigError(ValueError):
    """Raised when the merged configuration is invalid."""
    pass


@dataclass(frozen=True)
class FieldFailure:
    """One failing field of a candidate record."""

    qualified_id: str
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationError(ValueError):
    """Raised when a candidate record fails structural validation.

    Carries every failing field, not only the first one.
    """

    def __init__(self, kind: str, failures: Sequence[FieldFailure]) -> None:
        self.kind = kind
        self.failures: Tuple[FieldFailure, ...] = tuple(failures)
        count = len(self.failures)
        noun = "field" if count == 1 else "fields"
        details = "; ".join(str(f) for f in self.failures)
        super().__init__(f"{kind} record failed validation ({count} {noun}): {details}")

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.failures]

    @property
    def qualified_ids(self) -> list[str]:
        return [f.qualified_id for f in self.failures]


__all__ = [
    "ModelDefinitionError",
    "DuplicateIdError",
    "MissingApplicabilityError",
    "UnknownIdError",
    "CompositionIntegrityError",
    "DeclarationError",
    "RegistryFrozenError",
    "UnvalidatedModelError",
    "ConfigError",
    "FieldFailure",
    "ValidationError",
]
