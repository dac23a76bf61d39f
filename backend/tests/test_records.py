"""
Tests for record transforms (flatten, unwind, reshape).
"""
from formexport.export.records import (
    drop_path,
    find_unwind_paths,
    flatten_record,
    get_path,
    is_unwound_column,
    reshape_record,
    set_path,
    unwind,
)


class TestFlattenRecord:
    def test_nested_objects_and_arrays(self):
        record = {"a": {"b": 1}, "c": [1, 2], "d": [{"e": "x"}]}

        assert flatten_record(record) == {"a.b": 1, "c.0": 1, "c.1": 2, "d.0.e": "x"}

    def test_empty_containers_produce_no_keys(self):
        assert flatten_record({"a": {}, "b": [], "c": None}) == {"c": None}


class TestUnwindPaths:
    def test_meta_key_is_never_unwound(self):
        records = [{"form": {"tags": ["x"]}, "items": [1]}]

        assert find_unwind_paths(records) == ["items"]

    def test_children_follow_parents(self):
        records = [{"grid": [{"tags": ["x", "y"]}], "other": {"list": [1]}}]

        assert find_unwind_paths(records) == ["grid", "grid.tags", "other.list"]

    def test_paths_collected_across_records_in_first_seen_order(self):
        records = [{"a": [1]}, {"b": [2], "a": [3]}]

        assert find_unwind_paths(records) == ["a", "b"]


class TestUnwind:
    def test_one_row_per_element(self):
        rows = unwind({"n": 1, "items": [{"k": "a"}, {"k": "b"}]}, ["items"])

        assert rows == [{"n": 1, "items": {"k": "a"}}, {"n": 1, "items": {"k": "b"}}]

    def test_empty_array_gives_single_row_without_value(self):
        assert unwind({"n": 1, "items": []}, ["items"]) == [{"n": 1}]

    def test_missing_path_leaves_row_untouched(self):
        record = {"n": 1}

        assert unwind(record, ["items"]) == [record]

    def test_independent_arrays_give_cartesian_product(self):
        rows = unwind({"a": [1, 2], "b": ["x", "y", "z"]}, ["a", "b"])

        assert len(rows) == 6

    def test_nested_arrays(self):
        rows = unwind({"grid": [{"tags": ["x", "y"]}, {"tags": ["z"]}]}, ["grid", "grid.tags"])

        assert [get_path(row, "grid.tags") for row in rows] == ["x", "y", "z"]

    def test_input_is_not_mutated(self):
        record = {"outer": {"items": [1, 2]}}

        unwind(record, ["outer.items"])

        assert record == {"outer": {"items": [1, 2]}}


def test_set_path_copies_only_along_path():
    shared = {"keep": True}
    record = {"a": {"b": 1}, "s": shared}

    updated = set_path(record, "a.b", 2)

    assert updated == {"a": {"b": 2}, "s": shared}
    assert record["a"]["b"] == 1
    assert updated["s"] is shared


def test_drop_path():
    record = {"a": {"b": 1, "c": 2}}

    assert drop_path(record, "a.b") == {"a": {"c": 2}}
    assert drop_path(record, "x.y") is record
    assert record == {"a": {"b": 1, "c": 2}}


def test_is_unwound_column():
    assert is_unwound_column("items", ["items"])
    assert is_unwound_column("items.k", ["items"])
    assert not is_unwound_column("items_count", ["items"])
    assert not is_unwound_column("name", ["items"])


def test_reshape_record_moves_meta_under_form():
    row = {"confirmationId": "X", "createdAt": "2024-01-01", "submission": {"b": "data", "a": "x"}}

    reshaped = reshape_record(row)

    assert reshaped == {"form": {"confirmationId": "X", "createdAt": "2024-01-01"}, "b": "data", "a": "x"}
    assert list(reshaped) == ["form", "b", "a"]
