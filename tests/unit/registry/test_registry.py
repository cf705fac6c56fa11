"""ModelRegistry: registration, lookups and composition integrity."""
from __future__ import annotations

import pytest

from docschema.core.errors import (
    CompositionIntegrityError,
    DuplicateIdError,
    MissingApplicabilityError,
    RegistryFrozenError,
    UnknownIdError,
    UnvalidatedModelError,
)
from docschema.core.model import (
    CompositionEntry,
    CompositionTable,
    Constraint,
    DocumentKind,
    EnumDefinition,
    FamilyDefinition,
    SectionDefinition,
)
from docschema.core.registry import DocumentModel, ModelRegistry

from helpers.builders import (
    REQUIRED,
    make_field,
    make_section,
    make_table,
    small_registry,
    small_table,
)


class TestRegistration:
    def test_duplicate_section_id(self) -> None:
        registry = ModelRegistry()
        registry.register(make_section("2.2", "Scope"))
        with pytest.raises(DuplicateIdError) as exc:
            registry.register(make_section("2.2", "Other"))
        assert exc.value.offending_id == "2.2"

    def test_duplicate_family_and_enum(self) -> None:
        registry = small_registry()
        with pytest.raises(DuplicateIdError):
            registry.register(FamilyDefinition(id=1, name="Again", version="1.0.0"))
        with pytest.raises(DuplicateIdError):
            registry.register(EnumDefinition("Level", ("A",)))

    def test_duplicate_field_in_section(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(DuplicateIdError) as exc:
            registry.register(make_section("1.1", "Status", make_field("a"), make_field("a")))
        assert exc.value.offending_id == "1.1.a"

    def test_field_without_full_applicability(self) -> None:
        registry = ModelRegistry()
        partial = make_field("progress", "Int", {"Task": "required"})
        with pytest.raises(MissingApplicabilityError) as exc:
            registry.register(make_section("1.1", "Status", partial))
        assert exc.value.offending_id == "1.1.progress"
        assert "Plan" in str(exc.value)

    def test_field_appended_to_registered_section(self) -> None:
        registry = small_registry()
        registry.register(make_field("extra"), section_id="1.2")
        assert registry.resolve_section("1.2").field_names == ("items", "extra")

    def test_field_requires_known_section(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(UnknownIdError):
            registry.register(make_field("extra"), section_id="9.9")
        with pytest.raises(TypeError):
            registry.register(make_field("extra"))

    def test_unsupported_item(self) -> None:
        with pytest.raises(TypeError):
            ModelRegistry().register(object())  # type: ignore[arg-type]


class TestLookups:
    def test_resolve_family_and_section(self) -> None:
        registry = small_registry()
        assert isinstance(registry.resolve(1), FamilyDefinition)
        assert isinstance(registry.resolve("1"), FamilyDefinition)
        assert isinstance(registry.resolve("1.2"), SectionDefinition)

    def test_unknown_references(self) -> None:
        registry = small_registry()
        with pytest.raises(UnknownIdError):
            registry.resolve("9.9")
        with pytest.raises(UnknownIdError):
            registry.resolve("7")
        with pytest.raises(UnknownIdError):
            registry.resolve_enum("Missing")


class TestValidateComposition:
    def test_valid_model(self) -> None:
        model = small_registry().validate_composition(small_table())
        assert isinstance(model, DocumentModel)
        assert len(model.kinds) == 5
        composed = model.composition(DocumentKind.TASK)[0]
        assert composed.name == "meta"
        assert [s.key for s in composed.sections] == ["status", "notes"]

    def test_registry_is_frozen_after_validation(self) -> None:
        registry = small_registry()
        registry.validate_composition(small_table())
        assert registry.is_validated
        with pytest.raises(RegistryFrozenError):
            registry.register(make_section("1.3", "Late"))

    def test_same_table_returns_same_model(self) -> None:
        registry = small_registry()
        table = small_table()
        assert registry.validate_composition(table) is registry.validate_composition(table)

    def test_validate_uses_registered_table(self) -> None:
        registry = small_registry()
        with pytest.raises(CompositionIntegrityError):
            registry.validate()
        registry.register(small_table())
        assert registry.validate().table == small_table()

    def test_dangling_section_in_table(self) -> None:
        table = make_table([CompositionEntry(1, ("9.9",))])
        with pytest.raises(UnknownIdError) as exc:
            small_registry().validate_composition(table)
        assert exc.value.offending_id == "9.9"

    def test_unknown_family_in_table(self) -> None:
        table = make_table([CompositionEntry(4, ())])
        with pytest.raises(UnknownIdError):
            small_registry().validate_composition(table)

    def test_missing_kind(self) -> None:
        table = CompositionTable({"Plan": [CompositionEntry(1, ("1.1",))]})
        with pytest.raises(CompositionIntegrityError) as exc:
            small_registry().validate_composition(table)
        assert exc.value.offending_id == "Task"

    def test_section_outside_family(self) -> None:
        registry = small_registry()
        registry.register(make_section("1.3", "Unlisted"))
        with pytest.raises(CompositionIntegrityError, match="not part of family"):
            registry.validate_composition(make_table([CompositionEntry(1, ("1.3",))]))

    def test_section_used_twice(self) -> None:
        table = make_table([CompositionEntry(1, ("1.1", "1.1"))])
        with pytest.raises(CompositionIntegrityError, match="used twice"):
            small_registry().validate_composition(table)

    def test_family_listing_unknown_section(self) -> None:
        registry = ModelRegistry()
        registry.register(FamilyDefinition(id=1, name="Meta", version="1.0.0", section_ids=("1.5",)))
        with pytest.raises(UnknownIdError):
            registry.validate_composition(make_table([]))

    def test_section_prefix_must_match_family(self) -> None:
        registry = ModelRegistry()
        registry.register(make_section("2.1", "Overview"))
        registry.register(FamilyDefinition(id=1, name="Meta", version="1.0.0", section_ids=("2.1",)))
        with pytest.raises(CompositionIntegrityError, match="prefix"):
            registry.validate_composition(make_table([]))

    def test_unsupported_kind(self) -> None:
        registry = ModelRegistry()
        registry.register(
            FamilyDefinition(id=2, name="Scope", version="1.0.0", supported_kinds=(DocumentKind.PLAN,))
        )
        with pytest.raises(CompositionIntegrityError, match="does not support"):
            registry.validate_composition(make_table([CompositionEntry(2, ())]))

    def test_bad_family_version(self) -> None:
        registry = ModelRegistry()
        registry.register(FamilyDefinition(id=1, name="Meta", version="v1"))
        with pytest.raises(CompositionIntegrityError, match="semantic version"):
            registry.validate_composition(make_table([]))

    def test_unknown_enum_type(self) -> None:
        registry = ModelRegistry()
        registry.register(make_section("1.1", "Status", make_field("state", "Mood", REQUIRED)))
        with pytest.raises(UnknownIdError) as exc:
            registry.validate_composition(make_table([]))
        assert exc.value.offending_id == "Mood"

    def test_constraint_must_fit_wire_type(self) -> None:
        registry = ModelRegistry()
        bad = make_field("count", "Int", constraint=Constraint("non_empty"))
        registry.register(make_section("1.1", "Status", bad))
        with pytest.raises(CompositionIntegrityError, match="does not fit"):
            registry.validate_composition(make_table([]))

    def test_explicit_nullability_must_match_applicability(self) -> None:
        registry = ModelRegistry()
        registry.register(make_section("1.1", "Status", make_field("state", "String", REQUIRED, nullable=True)))
        with pytest.raises(CompositionIntegrityError, match="nullable=true"):
            registry.validate_composition(make_table([]))

    def test_reserved_relation_names(self) -> None:
        registry = ModelRegistry()
        registry.register(make_section("1.1", "Status", make_field("family")))
        with pytest.raises(CompositionIntegrityError, match="reserved"):
            registry.validate_composition(make_table([]))

    def test_section_key_collides_with_family_field(self) -> None:
        registry = ModelRegistry()
        registry.register(make_section("1.3", "Extra", key="id"))
        registry.register(
            FamilyDefinition(
                id=1, name="Meta", version="1.0.0", section_ids=("1.3",), fields=(make_field("id", "ID"),)
            )
        )
        with pytest.raises(CompositionIntegrityError, match="collides"):
            registry.validate_composition(make_table([CompositionEntry(1, ("1.3",))]))

    def test_family_listed_twice_for_one_kind(self) -> None:
        table = make_table(
            [
                CompositionEntry(1, ("1.1",), name="metaA"),
                CompositionEntry(1, ("1.2",), name="metaB"),
            ]
        )
        with pytest.raises(CompositionIntegrityError, match="listed twice") as exc:
            small_registry().validate_composition(table)
        assert exc.value.offending_id == "1"

    def test_relation_name_clashes_with_document_field(self) -> None:
        table = make_table([CompositionEntry(1, ("1.1",), name="title")])
        with pytest.raises(CompositionIntegrityError, match="used twice"):
            small_registry().validate_composition(table)

    def test_first_error_does_not_depend_on_registration_order(self) -> None:
        sections = [
            make_section("1.1", "A", make_field("a", "Alpha")),
            make_section("1.2", "B", make_field("b", "Beta")),
        ]
        offending = []
        for ordered in (sections, list(reversed(sections))):
            registry = ModelRegistry()
            for section in ordered:
                registry.register(section)
            with pytest.raises(UnknownIdError) as exc:
                registry.validate_composition(make_table([]))
            offending.append(exc.value.offending_id)
        assert offending == ["Alpha", "Alpha"]


class TestDocumentModel:
    def test_cannot_be_constructed_directly(self) -> None:
        with pytest.raises(UnvalidatedModelError):
            DocumentModel(
                enums={},
                sections={},
                families={},
                effective={},
                keys={},
                table=small_table(),
                composition={},
                document=None,  # type: ignore[arg-type]
            )

    def test_iter_field_refs(self) -> None:
        model = small_registry().validate_composition(small_table())
        qids = [ref.qualified_id for ref in model.iter_field_refs()]
        assert qids == [
            "document.id",
            "document.title",
            "1.id",
            "1.1.state",
            "1.1.note",
            "1.2.items",
        ]
        scopes = {ref.qualified_id: ref.scope for ref in model.iter_field_refs()}
        assert scopes["1.id"] == "family"
        assert scopes["1.2.items"] == "section"


class TestBundledModel:
    def test_loads_and_validates(self, bundled_model) -> None:
        assert [f.id for f in bundled_model.families] == [1, 2]
        task = bundled_model.composition(DocumentKind.TASK)
        assert [c.name for c in task] == ["metaGovernance"]
        assert [s.id for s in task[0].sections] == ["1.1.1", "1.2"]
        assert [s.key for s in task[0].sections] == ["status", "priorityDrivers"]

    def test_explicit_section_key(self, bundled_model) -> None:
        assert bundled_model.section_key("2.5") == "boundariesScope"
