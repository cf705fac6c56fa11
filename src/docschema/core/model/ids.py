"""Qualified ids used by the documentation index and validation failures.

Section ids already start with their family id, so a section's qualified id
is its own id and its fields hang off it directly.

Layout:
    family          "<familyId>"             e.g. "1"
    section         "<sectionId>"            e.g. "1.1.1"
    family field    "<familyId>.<field>"     e.g. "1.familyCreatedOn"
    section field   "<sectionId>.<field>"    e.g. "1.1.1.progress"
    document field  "document.<field>"       e.g. "document.title"
    document kind   "<Kind>"                 e.g. "Task"
"""
from __future__ import annotations

from typing import Optional

DOCUMENT_SCOPE = "document"


def family_qid(family_id: int) -> str:
    return str(family_id)


def section_qid(section_id: str) -> str:
    return str(section_id)


def field_qid(family_id: int, section_id: Optional[str], field_name: str) -> str:
    if section_id is None:
        return f"{family_id}.{field_name}"
    return f"{section_id}.{field_name}"


def document_field_qid(field_name: str) -> str:
    return f"{DOCUMENT_SCOPE}.{field_name}"


__all__ = [
    "DOCUMENT_SCOPE",
    "family_qid",
    "section_qid",
    "field_qid",
    "document_field_qid",
]
