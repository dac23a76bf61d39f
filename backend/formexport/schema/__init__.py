"""
Form schema decoding and field flattening.
"""
from formexport.schema.flattener import (
    ColumnsNode,
    GroupNode,
    LeafNode,
    RowsNode,
    SchemaNode,
    decode_components,
    flatten_components,
    read_schema_fields,
)

__all__ = [
    "ColumnsNode",
    "GroupNode",
    "LeafNode",
    "RowsNode",
    "SchemaNode",
    "decode_components",
    "flatten_components",
    "read_schema_fields",
]
