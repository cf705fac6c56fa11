"""GraphQL wire schema generation."""
from __future__ import annotations

from typing import List

import pytest

from docschema.core.errors import UnknownIdError, UnvalidatedModelError
from docschema.core.generators import DocumentValidator, WireSchemaGenerator
from docschema.core.generators.wire_schema import HEADER
from docschema.core.model import DocumentKind, family_qid, section_qid
from docschema.core.registry import ModelRegistry, load_declarations

from helpers.builders import small_registry, small_table


def _block(text: str, header: str) -> List[str]:
    """Lines of the type or interface block opened by ``header``."""
    lines = text.splitlines()
    start = lines.index(header)
    end = lines.index("}", start)
    return lines[start + 1 : end]


@pytest.fixture(scope="module")
def schema(bundled_model):
    return WireSchemaGenerator(bundled_model).generate()


class TestLayout:
    def test_header_and_scalars(self, schema) -> None:
        lines = schema.text.splitlines()
        assert lines[0] == HEADER
        assert "scalar DateTime" in lines
        assert schema.text.endswith("}\n")

    def test_enums_declared_once(self, schema) -> None:
        for name in ("StatusKey", "PriorityLevel", "PriorityDriver", "ScopeItemCategory"):
            assert schema.text.count(f"enum {name} {{") == 1
        assert schema.type_names[:2] == ("StatusKey", "PriorityLevel")

    def test_every_kind_has_interface_and_type(self, schema) -> None:
        for kind in DocumentKind:
            assert f"interface _Document_{kind.value}_ {{" in schema.text
            assert f"type {kind.value} implements _Document_{kind.value}_ {{" in schema.text

    def test_type_names_unique(self, schema) -> None:
        assert len(schema.type_names) == len(set(schema.type_names))


class TestTaskSchema:
    def test_document_type(self, schema) -> None:
        body = _block(schema.text, "type Task implements _Document_Task_ {")
        assert "  id: ID!" in body
        assert "  title: String!" in body
        assert "  description: String" in body
        assert "  metaGovernance: _Family_1_MetaGovernance_Task_! @hasInverse(field: document)" in body

    def test_interface_has_no_directives(self, schema) -> None:
        body = _block(schema.text, "interface _Document_Task_ {")
        assert "  metaGovernance: _Family_1_MetaGovernance_Task_!" in body
        assert not any("@hasInverse" in line for line in body)

    def test_family_type(self, schema) -> None:
        body = _block(schema.text, "type _Family_1_MetaGovernance_Task_ {")
        assert "  status: _Section_1_1_1_TaskStatus_Task_! @hasInverse(field: family)" in body
        assert "  priorityDrivers: _Section_1_2_PriorityDrivers_Task_! @hasInverse(field: family)" in body
        assert body[-1] == "  document: Task!"

    def test_specialized_section_fields(self, schema) -> None:
        body = _block(schema.text, "type _Section_1_1_1_TaskStatus_Task_ {")
        assert "  progress: Int!" in body
        assert "  planningEstimate: Int!" in body
        assert "  currentState: StatusKey!" in body
        assert body[-1] == "  family: _Family_1_MetaGovernance_Task_!"

    def test_omitted_field_is_absent(self, schema) -> None:
        task = _block(schema.text, "type _Section_1_2_PriorityDrivers_Task_ {")
        plan = _block(schema.text, "type _Section_1_2_PriorityDrivers_Plan_ {")
        assert not any(line.startswith("  justification") for line in task)
        assert "  justification: String" in plan
        assert "  priorityDrivers: [PriorityDriver!]!" in task


class TestOtherKinds:
    def test_base_section_progress_is_nullable_for_plan(self, schema) -> None:
        body = _block(schema.text, "type _Section_1_1_Status_Plan_ {")
        assert "  progress: Int" in body

    def test_per_kind_required_override(self, schema) -> None:
        project = _block(schema.text, "type _Section_2_1_Overview_Project_ {")
        feature = _block(schema.text, "type _Section_2_1_Overview_Feature_ {")
        assert "  businessValue: String!" in project
        assert "  businessValue: String" in feature

    def test_module_has_only_history(self, schema) -> None:
        body = _block(schema.text, "type Module implements _Document_Module_ {")
        relations = [line for line in body if "@hasInverse" in line]
        assert relations == ["  metaGovernance: _Family_1_MetaGovernance_Module_! @hasInverse(field: document)"]


class TestDecisions:
    def test_is_non_nullable(self, schema) -> None:
        assert schema.is_non_nullable("1.1.1.progress", DocumentKind.TASK) is True
        assert schema.is_non_nullable("1.1.progress", DocumentKind.PLAN) is False
        assert schema.is_non_nullable("1.2.justification", DocumentKind.TASK) is False
        assert schema.is_non_nullable("document.title", DocumentKind.MODULE) is True
        assert schema.is_non_nullable("1.1.1", DocumentKind.TASK) is True

    def test_unknown_id(self, schema) -> None:
        with pytest.raises(UnknownIdError):
            schema.is_non_nullable("9.9.nothing", DocumentKind.TASK)

    def test_matches_validator_for_every_id(self, bundled_model, schema) -> None:
        ids = [ref.qualified_id for ref in bundled_model.iter_field_refs()]
        ids += [family_qid(f.id) for f in bundled_model.families]
        ids += [section_qid(s) for f in bundled_model.families for s in f.section_ids]
        for kind in bundled_model.kinds:
            validator = DocumentValidator(bundled_model, kind)
            for qid in ids:
                assert schema.is_non_nullable(qid, kind) == validator.requires(qid), (kind, qid)

    def test_dependencies(self, schema) -> None:
        edges = schema.dependencies_of("Task")
        assert any(
            e.target == "_Family_1_MetaGovernance_Task_" and e.relationship == "hasInverse" for e in edges
        )
        assert any(e.target == "StatusKey" for e in schema.dependencies_of("_Section_1_1_1_TaskStatus_Task_"))


class TestDeterminism:
    def test_same_model_same_text(self, bundled_model, schema) -> None:
        assert WireSchemaGenerator(bundled_model).generate().text == schema.text

    def test_registration_order_does_not_matter(self, schema) -> None:
        registry = ModelRegistry()
        for item in reversed(load_declarations()):
            registry.register(item)
        assert WireSchemaGenerator(registry.validate()).generate().text == schema.text


def test_small_model_task_omits_note() -> None:
    text = WireSchemaGenerator(small_registry().validate_composition(small_table())).generate().text
    task = _block(text, "type _Section_1_1_Status_Task_ {")
    plan = _block(text, "type _Section_1_1_Status_Plan_ {")
    assert "  note: String" not in task
    assert "  note: String" in plan
    assert "  items: [String!]" in _block(text, "type _Section_1_2_Notes_Task_ {")


def test_requires_validated_model() -> None:
    with pytest.raises(UnvalidatedModelError):
        WireSchemaGenerator(small_registry())  # type: ignore[arg-type]
