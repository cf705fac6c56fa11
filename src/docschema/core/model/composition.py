"""Document composition table: which families and sections make up each kind."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from .kinds import DocumentKind


@dataclass(frozen=True)
class CompositionEntry:
    """One (family, sections used) pair of a document kind's recipe.

    ``name`` is the document's relation field for the family; when empty the
    family's own relation name is used.
    """

    family_id: int
    sections_used: Tuple[str, ...]
    name: Optional[str] = None

    @classmethod
    def from_declaration(cls, data: Mapping[str, Any]) -> "CompositionEntry":
        return cls(
            family_id=int(data["family"]),
            sections_used=tuple(str(s) for s in data.get("sections", [])),
            name=data.get("name"),
        )


class CompositionTable:
    """Mapping of document kind to its ordered composition entries.

    Kinds keep their declaration order; it is the emission order of every
    generated artifact. The table is read-only once built.
    """

    def __init__(self, entries: Mapping[DocumentKind, Sequence[CompositionEntry]]) -> None:
        self._entries: Mapping[DocumentKind, Tuple[CompositionEntry, ...]] = MappingProxyType(
            {DocumentKind.parse(k): tuple(v) for k, v in entries.items()}
        )

    @classmethod
    def from_declaration(cls, data: Mapping[str, Iterable[Mapping[str, Any]]]) -> "CompositionTable":
        entries: Dict[DocumentKind, Tuple[CompositionEntry, ...]] = {}
        for kind_name, raw_entries in data.items():
            entries[DocumentKind.parse(kind_name)] = tuple(
                CompositionEntry.from_declaration(e) for e in raw_entries or []
            )
        return cls(entries)

    @property
    def kinds(self) -> Tuple[DocumentKind, ...]:
        return tuple(self._entries.keys())

    def entries_for(self, kind: DocumentKind) -> Tuple[CompositionEntry, ...]:
        return self._entries[kind]

    def items(self) -> Iterator[Tuple[DocumentKind, Tuple[CompositionEntry, ...]]]:
        return iter(self._entries.items())

    def __contains__(self, kind: object) -> bool:
        return kind in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompositionTable):
            return NotImplemented
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"CompositionTable(kinds={[k.value for k in self.kinds]})"


__all__ = ["CompositionEntry", "CompositionTable"]
