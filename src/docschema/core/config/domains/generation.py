"""Domain-specific configuration for artifact generation."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig


class GenerationConfig(BaseDomainConfig):
    """Where the model is read from and where artifacts are written."""

    def _config_section(self) -> str:
        return "generation"

    @cached_property
    def model_dir(self) -> Path:
        """Model directory; the bundled model when unset."""
        raw = self.section.get("model_dir")
        if not raw:
            from docschema.core.registry.loader import default_model_dir

            return default_model_dir()
        return self._resolve_path(str(raw))

    @cached_property
    def output_dir(self) -> Path:
        return self._resolve_path(str(self.section.get("output_dir") or "generated"))

    @cached_property
    def wire_schema_filename(self) -> str:
        return str(self.section.get("wire_schema_filename") or "schema.graphql")

    @cached_property
    def documentation_filename(self) -> str:
        return str(self.section.get("documentation_filename") or "documentation.json")

    @cached_property
    def validator_schema_dir(self) -> str:
        """Subdirectory of the output directory for per-kind JSON Schemas."""
        return str(self.section.get("validator_schema_dir") or "validators")

    @cached_property
    def parallel(self) -> bool:
        return bool(self.section.get("parallel", True))


__all__ = ["GenerationConfig"]
