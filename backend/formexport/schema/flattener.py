"""
Schema flattener - ordered leaf field paths from a form.io style schema.

Raw component JSON is decoded once into explicit node variants:
- LeafNode: a field that holds a value
- ColumnsNode: layout columns, each with its own component list
- RowsNode: table layout, rows of cells, each cell with a component list
- GroupNode: any other container with a "components" list (panel, fieldset,
  datagrid, container, ...)

Malformed entries (non-objects, collections of the wrong shape) are dropped
during decoding so they never block the rest of the schema.

Flattening is a depth-first pre-order walk that emits each leaf's field path
once, in declaration order. Layout containers add no path segment; data
containers (a keyed group with input=true) prefix their children with
"<key>." because that is how their values nest in submission data.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeafNode:
    key: str
    type: Optional[str] = None


@dataclass(frozen=True)
class ColumnsNode:
    columns: List[List["SchemaNode"]] = field(default_factory=list)
    type: Optional[str] = "columns"


@dataclass(frozen=True)
class RowsNode:
    rows: List[List[List["SchemaNode"]]] = field(default_factory=list)
    type: Optional[str] = "table"


@dataclass(frozen=True)
class GroupNode:
    components: List["SchemaNode"] = field(default_factory=list)
    key: Optional[str] = None
    type: Optional[str] = None
    data_scoped: bool = False  # Children's values nest under this node's key


SchemaNode = Union[LeafNode, ColumnsNode, RowsNode, GroupNode]


def decode_components(raw: Any) -> List[SchemaNode]:
    """
    Decode a raw component list into schema nodes.

    Args:
        raw: Component list as stored in the form version schema

    Returns:
        Decoded nodes; [] for a missing or non-list value
    """
    if not isinstance(raw, list):
        return []

    nodes: List[SchemaNode] = []
    for component in raw:
        node = decode_component(component)
        if node is not None:
            nodes.append(node)
    return nodes


def decode_component(raw: Any) -> Optional[SchemaNode]:
    """Decode a single component; None if it is malformed or holds no data."""
    if not isinstance(raw, dict):
        logger.debug("Skipping non-object component: %r", raw)
        return None

    node_type = raw.get("type") if isinstance(raw.get("type"), str) else None
    key = raw.get("key") if isinstance(raw.get("key"), str) and raw.get("key") else None

    if "columns" in raw:
        columns = raw["columns"]
        if not isinstance(columns, list):
            logger.debug("Skipping '%s': columns is not a list", key)
            return None
        return ColumnsNode(
            columns=[_decode_cell(column) for column in columns if isinstance(column, dict)],
            type=node_type,
        )

    if "rows" in raw:
        rows = raw["rows"]
        if not isinstance(rows, list):
            logger.debug("Skipping '%s': rows is not a list", key)
            return None
        return RowsNode(
            rows=[
                [_decode_cell(cell) for cell in row if isinstance(cell, dict)]
                for row in rows
                if isinstance(row, list)
            ],
            type=node_type,
        )

    if "components" in raw:
        children = raw["components"]
        if not isinstance(children, list):
            logger.debug("Skipping '%s': components is not a list", key)
            return None
        return GroupNode(
            components=decode_components(children),
            key=key,
            type=node_type,
            data_scoped=bool(key and raw.get("input") is True),
        )

    if key is None:
        return None
    if raw.get("input") is False:
        # Static content (html, content blocks) carries no value
        return None
    return LeafNode(key=key, type=node_type)


def _decode_cell(raw: dict) -> List[SchemaNode]:
    return decode_components(raw.get("components"))


def flatten_components(components: Any) -> List[str]:
    """
    Flatten a component tree into ordered, unique leaf field paths.

    Accepts either raw component JSON or already decoded nodes. Never raises
    for malformed input.

    Args:
        components: Raw component list or list of SchemaNode

    Returns:
        Field paths in declaration order, first occurrence wins

    Examples:
        flatten_components([{"key": "a"}, {"type": "columns", "columns": [{"components": [{"key": "b"}]}]}])
        → ["a", "b"]
    """
    if isinstance(components, list) and all(_is_node(c) for c in components):
        nodes = components
    else:
        nodes = decode_components(components)

    paths: List[str] = []
    seen = set()
    for path in _walk(nodes, ""):
        if path not in seen:
            seen.add(path)
            paths.append(path)
    return paths


def read_schema_fields(schema: Any) -> List[str]:
    """Field paths for a form version schema ({"components": [...]})."""
    if not isinstance(schema, dict):
        return []
    return flatten_components(schema.get("components"))


def _is_node(value: Any) -> bool:
    return isinstance(value, (LeafNode, ColumnsNode, RowsNode, GroupNode))


def _walk(nodes: Iterable[SchemaNode], prefix: str) -> Iterable[str]:
    for node in nodes:
        if isinstance(node, LeafNode):
            yield f"{prefix}{node.key}"
        elif isinstance(node, ColumnsNode):
            for column in node.columns:
                yield from _walk(column, prefix)
        elif isinstance(node, RowsNode):
            for row in node.rows:
                for cell in row:
                    yield from _walk(cell, prefix)
        elif isinstance(node, GroupNode):
            child_prefix = f"{prefix}{node.key}." if node.data_scoped else prefix
            yield from _walk(node.components, child_prefix)
