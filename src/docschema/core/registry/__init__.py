"""Model registry: registration, integrity checks and the validated snapshot."""
from __future__ import annotations

from .base import RESERVED_FAMILY_FIELDS, RESERVED_SECTION_FIELDS, ModelRegistry
from .inheritance import ancestry, check_superset, effective_fields, fold_layers, relation_key
from .loader import default_model_dir, load_declarations
from .snapshot import ComposedFamily, ComposedSection, DocumentModel, FieldRef

__all__ = [
    "ModelRegistry",
    "RESERVED_SECTION_FIELDS",
    "RESERVED_FAMILY_FIELDS",
    "DocumentModel",
    "ComposedFamily",
    "ComposedSection",
    "FieldRef",
    "ancestry",
    "check_superset",
    "effective_fields",
    "fold_layers",
    "relation_key",
    "default_model_dir",
    "load_declarations",
]
