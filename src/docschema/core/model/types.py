"""Wire types, structural constraints and named enums.

A field carries both a wire type (how it is declared in the GraphQL schema)
and a constraint (how a value is checked at runtime). Both are derived from
the same declaration, and ``WireType.accepts`` keeps them compatible.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

SCALARS: Tuple[str, ...] = ("ID", "String", "Int", "Float", "Boolean", "DateTime")

# Scalars that are built into GraphQL and never need a declaration.
BUILTIN_SCALARS: Tuple[str, ...] = ("ID", "String", "Int", "Float", "Boolean")

CONSTRAINT_KINDS: Tuple[str, ...] = (
    "string",
    "non_empty",
    "id",
    "range",
    "enum",
    "datetime",
    "boolean",
    "array",
)


@dataclass(frozen=True)
class EnumDefinition:
    """A named value set shared by the wire schema and the validator."""

    name: str
    values: Tuple[str, ...]
    description: str = ""


@dataclass(frozen=True)
class WireType:
    """GraphQL type of a field.

    ``nullable`` is the declared base nullability. ``None`` means it was not
    declared and is derived from the field's applicability.
    """

    name: str
    is_list: bool = False
    nullable: Optional[bool] = None

    @property
    def is_scalar(self) -> bool:
        return self.name in SCALARS

    def render(self, non_null: bool) -> str:
        """Render the type token, e.g. ``String!`` or ``[PriorityDriver!]``."""
        token = f"[{self.name}!]" if self.is_list else self.name
        return f"{token}!" if non_null else token

    def accepts(self, constraint: "Constraint") -> bool:
        """Whether ``constraint`` can describe values of this wire type."""
        if self.is_list:
            return (
                constraint.kind == "array"
                and constraint.items is not None
                and WireType(self.name).accepts(constraint.items)
            )
        if constraint.kind == "array":
            return False
        allowed = {
            "ID": ("id", "non_empty", "string"),
            "String": ("string", "non_empty"),
            "Int": ("range",),
            "Float": ("range",),
            "Boolean": ("boolean",),
            "DateTime": ("datetime",),
        }.get(self.name)
        if allowed is None:
            return constraint.kind == "enum" and constraint.enum == self.name
        if self.name == "Int" and constraint.number_type != "integer":
            return False
        return constraint.kind in allowed


@dataclass(frozen=True)
class Constraint:
    """Structural rule checked against a field value.

    Attributes:
        kind: One of ``CONSTRAINT_KINDS``
        number_type: "integer" or "number" (range only)
        minimum: Inclusive lower bound (range only)
        maximum: Inclusive upper bound (range only)
        enum: Name of a registered EnumDefinition (enum only)
        min_items: Minimum cardinality (array only)
        items: Constraint applied to each item (array only)
    """

    kind: str
    number_type: str = "integer"
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    enum: Optional[str] = None
    min_items: int = 0
    items: Optional["Constraint"] = None

    def __post_init__(self) -> None:
        if self.kind not in CONSTRAINT_KINDS:
            raise ValueError(f"Unknown constraint kind: {self.kind!r}")
        if self.kind == "enum" and not self.enum:
            raise ValueError("enum constraint requires an enum name")
        if self.kind == "array" and self.items is None:
            raise ValueError("array constraint requires an items constraint")

    @classmethod
    def for_wire_type(cls, wire: WireType) -> "Constraint":
        """Default constraint implied by a wire type."""
        item = _scalar_default(wire.name)
        if wire.is_list:
            return cls(kind="array", items=item)
        return item

    @classmethod
    def from_declaration(cls, data: Mapping[str, Any]) -> "Constraint":
        items = data.get("items")
        return cls(
            kind=str(data["kind"]),
            number_type=str(data.get("number_type", "integer")),
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
            enum=data.get("enum"),
            min_items=int(data.get("min_items", 0) or 0),
            items=cls.from_declaration(items) if isinstance(items, Mapping) else None,
        )

    def enum_names(self) -> Tuple[str, ...]:
        """Every enum referenced by this constraint, nested items included."""
        names: Tuple[str, ...] = (self.enum,) if self.enum else ()
        if self.items is not None:
            names += self.items.enum_names()
        return names

    def to_json_schema(self, resolve_enum: Callable[[str], EnumDefinition]) -> Dict[str, Any]:
        """Compile to a Draft 2020-12 JSON Schema fragment."""
        if self.kind == "string":
            return {"type": "string"}
        if self.kind in ("non_empty", "id"):
            return {"type": "string", "minLength": 1}
        if self.kind == "boolean":
            return {"type": "boolean"}
        if self.kind == "datetime":
            return {"type": "string", "format": "date-time"}
        if self.kind == "enum":
            return {"enum": list(resolve_enum(str(self.enum)).values)}
        if self.kind == "range":
            schema: Dict[str, Any] = {"type": self.number_type}
            if self.minimum is not None:
                schema["minimum"] = self.minimum
            if self.maximum is not None:
                schema["maximum"] = self.maximum
            return schema
        if self.items is None:
            raise ValueError("array constraint requires an items constraint")
        schema = {"type": "array", "items": self.items.to_json_schema(resolve_enum)}
        if self.min_items:
            schema["minItems"] = self.min_items
        return schema


def _scalar_default(name: str) -> Constraint:
    if name == "ID":
        return Constraint(kind="id")
    if name == "String":
        return Constraint(kind="string")
    if name == "Int":
        return Constraint(kind="range", number_type="integer")
    if name == "Float":
        return Constraint(kind="range", number_type="number")
    if name == "Boolean":
        return Constraint(kind="boolean")
    if name == "DateTime":
        return Constraint(kind="datetime")
    return Constraint(kind="enum", enum=name)


__all__ = [
    "SCALARS",
    "BUILTIN_SCALARS",
    "CONSTRAINT_KINDS",
    "EnumDefinition",
    "WireType",
    "Constraint",
]
