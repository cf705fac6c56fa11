"""Identifier helpers shared by the generators."""
from __future__ import annotations

import re
from typing import List, Tuple, Union

_WORD_RE = re.compile(r"[A-Za-z0-9]+")


def _words(text: str) -> List[str]:
    return _WORD_RE.findall(text)


def camel_case(text: str) -> str:
    """Convert a display name to a camelCase identifier.

    >>> camel_case("Meta & Governance")
    'metaGovernance'
    >>> camel_case("Priority Drivers")
    'priorityDrivers'
    """
    words = _words(text)
    if not words:
        return ""
    head, *tail = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in tail)


def pascal_case(text: str) -> str:
    """Convert a display name to a PascalCase identifier.

    >>> pascal_case("Meta & Governance")
    'MetaGovernance'
    """
    return "".join(w[:1].upper() + w[1:].lower() for w in _words(text))


def natural_key(dotted_id: Union[str, int]) -> Tuple[int, ...]:
    """Sort key for dotted numeric ids ("1.10" sorts after "1.9")."""
    parts = str(dotted_id).split(".")
    return tuple(int(p) if p.isdigit() else 0 for p in parts)


def single_line(text: str) -> str:
    """Collapse whitespace so multi-line prose fits on one comment line."""
    return " ".join(str(text).split())


__all__ = ["camel_case", "pascal_case", "natural_key", "single_line"]
