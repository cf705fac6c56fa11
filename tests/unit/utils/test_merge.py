from __future__ import annotations

from docschema.core.utils.merge import deep_merge, merge_arrays


def test_deep_merge_nested_without_mutation() -> None:
    base = {"a": {"x": 1, "y": [1, 2]}, "b": 1}
    override = {"a": {"y": ["+", 3]}, "c": 2}
    merged = deep_merge(base, override)
    assert merged == {"a": {"x": 1, "y": [1, 2, 3]}, "b": 1, "c": 2}
    assert base == {"a": {"x": 1, "y": [1, 2]}, "b": 1}


def test_merge_arrays() -> None:
    assert merge_arrays([1, 2], [3]) == [3]
    assert merge_arrays([1, 2], ["=", 9]) == [9]
    assert merge_arrays([1, 2], []) == [1, 2]
