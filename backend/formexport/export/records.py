"""
Record transforms for submission exports.

- flatten_record: nested dicts/lists → {"a.b": v, "arr.0": v}
- find_unwind_paths: array-valued paths observed in the data
- unwind: one row per array element, for each unwind path in turn

All functions are pure: input records are never mutated.
"""
from typing import Any, Dict, Iterable, List, Optional

META_KEY = "form"
SEPARATOR = "."


def flatten_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten a nested record into dotted keys.

    Objects and arrays are both expanded (array elements keyed by index).
    Empty objects and arrays produce no key.

    Examples:
        flatten_record({"a": {"b": 1}, "c": [1, 2]}) → {"a.b": 1, "c.0": 1, "c.1": 2}
    """
    flat: Dict[str, Any] = {}
    _flatten_into(record, "", flat)
    return flat


def _flatten_into(value: Any, prefix: str, flat: Dict[str, Any]) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            _flatten_into(child, f"{prefix}{key}{SEPARATOR}", flat)
    elif isinstance(value, list):
        for index, child in enumerate(value):
            _flatten_into(child, f"{prefix}{index}{SEPARATOR}", flat)
    else:
        flat[prefix[: -len(SEPARATOR)]] = value


def find_unwind_paths(records: Iterable[Dict[str, Any]]) -> List[str]:
    """
    Collect dotted paths holding arrays, in first-seen order.

    The top-level "form" metadata is never unwound. Paths inside array
    elements are reported relative to the array path itself (after the
    array is unwound, the path holds a single element), and always after
    their parent path.

    Examples:
        find_unwind_paths([{"grid": [{"tags": ["x"]}]}]) → ["grid", "grid.tags"]
    """
    paths: List[str] = []
    seen = set()

    def visit(value: Any, prefix: str) -> None:
        if not isinstance(value, dict):
            return
        for key, child in value.items():
            if not prefix and key == META_KEY:
                continue
            path = f"{prefix}{key}"
            if isinstance(child, list):
                if path not in seen:
                    seen.add(path)
                    paths.append(path)
                for element in child:
                    visit(element, f"{path}{SEPARATOR}")
            elif isinstance(child, dict):
                visit(child, f"{path}{SEPARATOR}")

    for record in records:
        visit(record, "")
    return paths


def get_path(record: Dict[str, Any], path: str) -> Any:
    """Value at a dotted path, or None if any segment is missing."""
    value: Any = record
    for part in path.split(SEPARATOR):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def set_path(record: Dict[str, Any], path: str, new_value: Any) -> Dict[str, Any]:
    """
    Copy of record with new_value at a dotted path.

    Only the dicts along the path are copied; everything else is shared.
    """
    head, _, rest = path.partition(SEPARATOR)
    updated = dict(record)
    if rest:
        child = record.get(head)
        updated[head] = set_path(child if isinstance(child, dict) else {}, rest, new_value)
    else:
        updated[head] = new_value
    return updated


def drop_path(record: Dict[str, Any], path: str) -> Dict[str, Any]:
    """Copy of record without the value at a dotted path."""
    head, _, rest = path.partition(SEPARATOR)
    if head not in record:
        return record
    updated = dict(record)
    if not rest:
        del updated[head]
    elif isinstance(record[head], dict):
        updated[head] = drop_path(record[head], rest)
    return updated


def unwind(record: Dict[str, Any], paths: List[str]) -> List[Dict[str, Any]]:
    """
    Expand a record into one row per array element.

    Paths are applied in order; each row produced so far is expanded by the
    next path (so independent arrays give their cartesian product). A path
    holding an empty array yields a single row without that value; a path
    that does not hold an array leaves the row untouched.

    Args:
        record: Nested record
        paths: Unwind paths, parents before children

    Returns:
        Rows, at least one
    """
    rows = [record]
    for path in paths:
        expanded: List[Dict[str, Any]] = []
        for row in rows:
            value = get_path(row, path)
            if not isinstance(value, list):
                expanded.append(row)
            elif not value:
                expanded.append(drop_path(row, path))
            else:
                expanded.extend(set_path(row, path, element) for element in value)
        rows = expanded
    return rows


def is_unwound_column(column: str, paths: List[str]) -> bool:
    """True if a flattened column is an unwind path or lies beneath one."""
    for path in paths:
        if column == path or column.startswith(f"{path}{SEPARATOR}"):
            return True
    return False


def reshape_record(row: Dict[str, Any], content_key: str = "submission") -> Dict[str, Any]:
    """
    Put submission content at the top level with metadata under "form".

    Examples:
        reshape_record({"confirmationId": "X", "submission": {"a": 1}})
        → {"form": {"confirmationId": "X"}, "a": 1}
    """
    meta = {key: value for key, value in row.items() if key != content_key}
    content: Optional[Dict[str, Any]] = row.get(content_key)
    reshaped: Dict[str, Any] = {META_KEY: meta}
    if isinstance(content, dict):
        reshaped.update(content)
    return reshaped
