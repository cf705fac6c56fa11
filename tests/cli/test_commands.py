"""End-to-end runs of the docschema commands."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from docschema.cli._dispatcher import main

VALID_TASK = {
    "id": "task-1",
    "title": "Write the loader",
    "metaGovernance": {
        "id": "mg-1",
        "status": {
            "id": "st-1",
            "currentState": "NOT_STARTED",
            "priority": "LOW",
            "progress": 0,
            "planningEstimate": 2,
        },
        "priorityDrivers": {"id": "pd-1", "priorityDrivers": ["TEC_FLAKY_TEST"]},
    },
}


def _write_record(root: Path, name: str, record) -> Path:
    path = root / name
    if name.endswith(".json"):
        path.write_text(json.dumps(record), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(record), encoding="utf-8")
    return path


class TestCheck:
    def test_text(self, isolated_project, capsys) -> None:
        assert main(["check"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Model OK: 2 families, 6 sections, 5 document kinds")
        assert "  Task: metaGovernance" in out

    def test_json(self, isolated_project, capsys) -> None:
        assert main(["check", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["status"] == "success"
        assert data["families"] == 2
        assert data["composition"]["Plan"] == ["metaGovernance", "businessScope"]

    def test_broken_model_dir(self, isolated_project, capsys) -> None:
        empty = isolated_project / "model"
        empty.mkdir()
        assert main(["check", "--model-dir", str(empty)]) == 1
        assert "document.yaml" in capsys.readouterr().err

    def test_schema_problems_listed(self, isolated_project, capsys) -> None:
        model = isolated_project / "model"
        (model / "families").mkdir(parents=True)
        (model / "document.yaml").write_text("fields: []\n", encoding="utf-8")
        assert main(["check", "--model-dir", str(model), "--json"]) == 1
        data = json.loads(capsys.readouterr().err)
        assert data["error"] == "declaration_error"
        assert any("composition" in p for p in data["problems"])


class TestGenerate:
    def test_writes_artifacts(self, isolated_project, capsys) -> None:
        assert main(["generate", "--output-dir", "out"]) == 0
        out_dir = isolated_project / "out"
        assert (out_dir / "schema.graphql").read_text(encoding="utf-8").startswith("# Generated by docschema")
        assert json.loads((out_dir / "documentation.json").read_text(encoding="utf-8"))["Task"]["scope"] == "kind"
        assert (out_dir / "validators" / "Feature.schema.json").exists()
        assert "Wrote 7 files" in capsys.readouterr().out

    def test_uses_configured_output_dir(self, isolated_project) -> None:
        config = isolated_project / ".docschema" / "config.yaml"
        config.parent.mkdir()
        config.write_text("generation:\n  output_dir: build\n  parallel: false\n", encoding="utf-8")
        assert main(["generate"]) == 0
        assert (isolated_project / "build" / "schema.graphql").exists()

    def test_dry_run_writes_nothing(self, isolated_project, capsys) -> None:
        assert main(["generate", "--dry-run", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["dry_run"] is True
        assert "schema.graphql" in data["files"]
        assert not (isolated_project / "generated").exists()

    def test_repeated_runs_are_identical(self, isolated_project) -> None:
        assert main(["generate"]) == 0
        first = (isolated_project / "generated" / "schema.graphql").read_bytes()
        assert main(["generate"]) == 0
        assert (isolated_project / "generated" / "schema.graphql").read_bytes() == first


class TestValidate:
    def test_valid_yaml_record(self, isolated_project, capsys) -> None:
        path = _write_record(isolated_project, "task.yaml", VALID_TASK)
        assert main(["validate", "Task", str(path)]) == 0
        assert "valid Task" in capsys.readouterr().out

    def test_valid_json_record_relative_path(self, isolated_project) -> None:
        _write_record(isolated_project, "task.json", VALID_TASK)
        assert main(["validate", "task", "task.json"]) == 0

    def test_invalid_record_lists_every_failure(self, isolated_project, capsys) -> None:
        record = json.loads(json.dumps(VALID_TASK))
        del record["title"]
        record["metaGovernance"]["status"]["progress"] = 101
        _write_record(isolated_project, "task.yaml", record)
        assert main(["validate", "Task", "task.yaml"]) == 1
        out = capsys.readouterr().out
        assert "(2 errors)" in out
        assert "  title: is required [document.title]" in out
        assert "metaGovernance.status.progress" in out

    def test_invalid_record_json(self, isolated_project, capsys) -> None:
        record = json.loads(json.dumps(VALID_TASK))
        del record["metaGovernance"]["status"]["progress"]
        _write_record(isolated_project, "task.json", record)
        assert main(["validate", "Task", "task.json", "--json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["valid"] is False
        assert data["errors"] == [
            {"path": "metaGovernance.status.progress", "qualified_id": "1.1.1.progress", "message": "is required"}
        ]

    def test_unknown_kind(self, isolated_project, capsys) -> None:
        assert main(["validate", "Epic", "task.yaml"]) == 1
        assert "Unknown document kind" in capsys.readouterr().err

    def test_missing_file(self, isolated_project, capsys) -> None:
        assert main(["validate", "Task", "absent.yaml"]) == 1
        assert "Error:" in capsys.readouterr().err


class TestLookup:
    def test_field(self, isolated_project, capsys) -> None:
        assert main(["lookup", "1.1.1.progress"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("1.1.1.progress (field): progress")
        assert "  type: Int!" in out

    def test_json(self, isolated_project, capsys) -> None:
        assert main(["lookup", "2.5", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["key"] == "boundariesScope"
        assert data["name"] == "Boundaries & Scope"

    def test_unknown_id(self, isolated_project, capsys) -> None:
        assert main(["lookup", "9.9"]) == 1
        assert "9.9" in capsys.readouterr().err
