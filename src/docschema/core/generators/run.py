"""Generation run: build every artifact, then write them all or none.

The three generators only read the validated model, so they may run in
worker threads. Writing stages each file as a temp file beside its target
and renames them into place once all are staged.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from docschema.core.config import GenerationConfig
from docschema.core.registry import DocumentModel
from docschema.core.utils.io import atomic_write_many

from .base import require_model
from .metadata import DocumentationIndex, MetadataExtractor
from .validator import StructuralValidator, StructuralValidatorAssembler
from .wire_schema import WireSchema, WireSchemaGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedArtifacts:
    """The three outputs of one run, derived from the same model."""

    wire_schema: WireSchema
    validator: StructuralValidator
    documentation: DocumentationIndex

    def files(self, config: GenerationConfig) -> Dict[str, str]:
        """Relative file name -> text for every artifact written to disk."""
        out = {
            config.wire_schema_filename: self.wire_schema.text,
            config.documentation_filename: self.documentation.to_json(),
        }
        for kind, schema in self.validator.json_schemas().items():
            name = f"{config.validator_schema_dir}/{kind}.schema.json"
            out[name] = json.dumps(schema, indent=2, ensure_ascii=False) + "\n"
        return out


def _default_config() -> GenerationConfig:
    from docschema.data import read_yaml

    return GenerationConfig(config=read_yaml("config", "defaults.yaml"))


def generate_artifacts(model: DocumentModel, config: Optional[GenerationConfig] = None) -> GeneratedArtifacts:
    """Run the wire schema, validator and documentation generators."""
    model = require_model(model)
    config = config or _default_config()

    jobs: Dict[str, Callable[[], Any]] = {
        "wire_schema": WireSchemaGenerator(model).generate,
        "validator": StructuralValidatorAssembler(model).assemble,
        "documentation": MetadataExtractor(model).extract,
    }
    if config.parallel:
        with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="docschema-gen") as pool:
            futures = {name: pool.submit(job) for name, job in jobs.items()}
            results = {name: future.result() for name, future in futures.items()}
    else:
        results = {name: job() for name, job in jobs.items()}

    logger.info("Generated %d artifacts (parallel=%s)", len(results), config.parallel)
    return GeneratedArtifacts(**results)


def write_artifacts(
    artifacts: GeneratedArtifacts,
    output_dir: Optional[Path] = None,
    config: Optional[GenerationConfig] = None,
) -> List[Path]:
    """Write every artifact under ``output_dir``; all files are replaced or none."""
    config = config or _default_config()
    root = Path(output_dir) if output_dir is not None else config.output_dir
    contents = {root / name: text for name, text in artifacts.files(config).items()}
    written = atomic_write_many(contents)
    logger.info("Wrote %d files to %s", len(written), root)
    return written


__all__ = ["GeneratedArtifacts", "generate_artifacts", "write_artifacts"]
