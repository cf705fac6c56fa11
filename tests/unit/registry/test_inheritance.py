"""Section inheritance: effective fields, superset checks and relation keys."""
from __future__ import annotations

import pytest

from docschema.core.errors import CompositionIntegrityError, UnknownIdError
from docschema.core.model import CompositionEntry, DocumentKind, FamilyDefinition
from docschema.core.registry import (
    ModelRegistry,
    ancestry,
    check_superset,
    effective_fields,
    fold_layers,
    relation_key,
)

from helpers.builders import REQUIRED, make_field, make_section, make_table


def _sections(*sections):
    return {s.id: s for s in sections}


class TestEffectiveFields:
    def test_layers_fold_in_order(self) -> None:
        base = make_section("1.1", "Status", make_field("state"), make_field("progress", "Int"))
        derived = make_section(
            "1.1.1",
            "Task Status",
            make_field("progress", "Int", {"*": "optional", "Task": "required"}),
            make_field("estimate", "Int"),
            parent_id="1.1",
        )
        family = FamilyDefinition(
            id=1, name="Meta", version="1.0.0", section_fields=(make_field("id", "ID", REQUIRED),)
        )
        fields = effective_fields(derived, _sections(base, derived), family)
        assert [f.name for f in fields] == ["id", "state", "progress", "estimate"]
        progress = fields[2]
        assert progress.is_required(DocumentKind.TASK)
        assert not progress.is_required(DocumentKind.PLAN)

    def test_retype_rejected(self) -> None:
        with pytest.raises(CompositionIntegrityError, match="retypes"):
            fold_layers([("1.1", [make_field("progress", "Int")]), ("1.1.1", [make_field("progress", "String")])])

    def test_list_flag_is_part_of_the_type(self) -> None:
        with pytest.raises(CompositionIntegrityError):
            fold_layers([("1.1", [make_field("tags")]), ("1.1.1", [make_field("tags", is_list=True)])])

    def test_override_cannot_omit_inherited_field(self) -> None:
        with pytest.raises(CompositionIntegrityError, match="from required to omitted") as exc:
            fold_layers(
                [
                    ("1.1", [make_field("state", applicability=REQUIRED)]),
                    ("1.1.1", [make_field("state", applicability={"*": "omitted"})]),
                ]
            )
        assert exc.value.offending_id == "1.1.1.state"

    def test_override_cannot_relax_required(self) -> None:
        with pytest.raises(CompositionIntegrityError, match="for Task"):
            fold_layers(
                [
                    ("1.1", [make_field("state", applicability=REQUIRED)]),
                    ("1.1.1", [make_field("state", applicability={"*": "required", "Task": "optional"})]),
                ]
            )

    def test_override_may_add_kinds_the_base_omits(self) -> None:
        fields = fold_layers(
            [
                ("1.1", [make_field("note", applicability={"*": "optional", "Plan": "omitted"})]),
                ("1.1.1", [make_field("note", applicability={"*": "optional", "Task": "required"})]),
            ]
        )
        assert fields[0].is_required(DocumentKind.TASK)
        assert not fields[0].is_omitted(DocumentKind.PLAN)

    def test_widening_section_rejected_at_validation(self) -> None:
        registry = ModelRegistry()
        registry.register(make_section("1.1", "Status", make_field("state", applicability=REQUIRED)))
        registry.register(
            make_section("1.1.1", "Task Status", make_field("state", applicability={"*": "omitted"}), parent_id="1.1")
        )
        registry.register(FamilyDefinition(id=1, name="Meta", version="1.0.0", section_ids=("1.1", "1.1.1")))
        with pytest.raises(CompositionIntegrityError):
            registry.validate_composition(make_table([CompositionEntry(1, ("1.1.1",))]))

    def test_bundled_task_status(self, bundled_model) -> None:
        names = [f.name for f in bundled_model.effective_fields("1.1.1")]
        assert names == [
            "id",
            "sectionCreatedOn",
            "sectionLastUpdatedOn",
            "currentState",
            "priority",
            "progress",
            "planningEstimate",
            "implementationStartedOn",
            "completedOn",
        ]
        base = [f.name for f in bundled_model.effective_fields("1.1")]
        assert names[: len(base)] == base


class TestAncestry:
    def test_root_first(self) -> None:
        a = make_section("1.1", "A")
        b = make_section("1.1.1", "B", parent_id="1.1")
        c = make_section("1.1.1.1", "C", parent_id="1.1.1")
        assert [s.id for s in ancestry(c, _sections(a, b, c))] == ["1.1", "1.1.1", "1.1.1.1"]

    def test_unknown_parent(self) -> None:
        orphan = make_section("1.1.1", "B", parent_id="1.1")
        with pytest.raises(UnknownIdError) as exc:
            ancestry(orphan, _sections(orphan))
        assert exc.value.offending_id == "1.1"

    def test_cycle(self) -> None:
        a = make_section("1.1", "A", parent_id="1.2")
        b = make_section("1.2", "B", parent_id="1.1")
        with pytest.raises(CompositionIntegrityError, match="cyclic"):
            ancestry(a, _sections(a, b))


class TestCheckSuperset:
    def test_accepts_superset(self) -> None:
        base = [make_field("a"), make_field("b")]
        check_superset("1.1.1", base, base + [make_field("c")])

    def test_dropped_field(self) -> None:
        with pytest.raises(CompositionIntegrityError, match="drops"):
            check_superset("1.1.1", [make_field("a"), make_field("b")], [make_field("a")])

    def test_reordered_field(self) -> None:
        with pytest.raises(CompositionIntegrityError, match="reorders"):
            check_superset("1.1.1", [make_field("a"), make_field("b")], [make_field("b"), make_field("a")])


class TestRelationKey:
    def test_default_is_camel_case_name(self) -> None:
        section = make_section("2.5", "Boundaries & Scope")
        assert relation_key(section, _sections(section)) == "boundariesScope"

    def test_explicit_key_wins(self) -> None:
        section = make_section("2.5", "Boundaries & Scope", key="scope")
        assert relation_key(section, _sections(section)) == "scope"

    def test_specialization_inherits_base_key(self) -> None:
        base = make_section("1.1", "Status", key="state")
        derived = make_section("1.1.1", "Task Status", parent_id="1.1")
        assert relation_key(derived, _sections(base, derived)) == "state"
