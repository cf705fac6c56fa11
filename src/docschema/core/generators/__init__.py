"""Artifact generators over a validated document model."""
from __future__ import annotations

from .base import ModelGenerator, require_model
from .metadata import DocEntry, DocumentationIndex, MetadataExtractor
from .run import GeneratedArtifacts, generate_artifacts, write_artifacts
from .validator import (
    DocumentValidator,
    StructuralValidator,
    StructuralValidatorAssembler,
    ValidationResult,
)
from .wire_schema import SchemaDependency, WireSchema, WireSchemaGenerator

__all__ = [
    "ModelGenerator",
    "require_model",
    "WireSchema",
    "WireSchemaGenerator",
    "SchemaDependency",
    "DocumentValidator",
    "StructuralValidator",
    "StructuralValidatorAssembler",
    "ValidationResult",
    "DocEntry",
    "DocumentationIndex",
    "MetadataExtractor",
    "GeneratedArtifacts",
    "generate_artifacts",
    "write_artifacts",
]
