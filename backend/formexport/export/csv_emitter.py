"""
CSV emitter - deterministic CSV generation for submission exports.

Polars-based implementation:
- write_csv(include_header=True, separator=',', quote_style='necessary', line_terminator='\n')
- All columns Utf8, nulls written as empty strings
- Rows keep submission order; headers follow the reconciled order below

Header order:
1. "form.<key>" for each metadata key of the first record
2. Schema field paths (declaration order)
3. Any other key observed in the rows, first-seen order (schema drift)

Byte-identical on repeated runs with the same input.
"""
from typing import Any, Dict, List, Optional, Tuple
import polars as pl

from formexport.export.records import (
    META_KEY,
    SEPARATOR,
    find_unwind_paths,
    flatten_record,
    is_unwound_column,
    unwind,
)
from formexport.schemas.export import ExportTemplate


class CSVEmitter:
    """
    Emits submission CSVs for one of three templates.

    - unflattened: one row per submission, arrays flattened to indexed keys
    - flattenedWithFilled: one row per unwound array element, other values
      repeated on every row
    - flattenedWithBlankOut: same rows, but on continuation rows only the
      unwound columns hold values
    """

    def __init__(self, schema_fields: List[str], columns: Optional[List[str]] = None):
        """
        Initialize CSV emitter.

        Args:
            schema_fields: Field paths from the form version schema
            columns: Optional field paths to restrict the export to
        """
        self.schema_fields = schema_fields
        self.columns = set(columns) if columns else None

    def emit(self, records: List[Dict[str, Any]], template: ExportTemplate) -> bytes:
        """
        Emit CSV for reshaped submission records.

        Args:
            records: Records with metadata under "form" and content at top level
            template: CSV template

        Returns:
            UTF-8 CSV bytes
        """
        rows, _ = self.build_rows(records, template)
        headers = self.build_headers(records, rows)

        if not headers:
            return b""

        df = pl.DataFrame(
            {header: [render_cell(row.get(header)) for row in rows] for header in headers},
            schema={header: pl.Utf8 for header in headers},
        )
        csv = df.write_csv(
            include_header=True,
            separator=",",
            quote_style="necessary",
            line_terminator="\n",
        )
        return csv.encode("utf-8")

    def build_rows(
        self, records: List[Dict[str, Any]], template: ExportTemplate
    ) -> Tuple[List[Dict[str, Any]], List[str]]:
        """
        Turn records into flat rows for a template.

        Returns:
            Tuple of (flat rows, unwind paths used)
        """
        if template == ExportTemplate.UNFLATTENED:
            return [flatten_record(record) for record in records], []

        paths = find_unwind_paths(records)
        blank_out = template == ExportTemplate.FLATTENED_WITH_BLANK_OUT

        rows: List[Dict[str, Any]] = []
        for record in records:
            for index, part in enumerate(unwind(record, paths)):
                flat = flatten_record(part)
                if blank_out and index > 0:
                    flat = {key: value for key, value in flat.items() if is_unwound_column(key, paths)}
                rows.append(flat)
        return rows, paths

    def build_headers(self, records: List[Dict[str, Any]], rows: List[Dict[str, Any]]) -> List[str]:
        """Reconcile metadata, schema and observed headers."""
        meta = records[0].get(META_KEY) if records else None
        meta_headers = [f"{META_KEY}{SEPARATOR}{key}" for key in meta] if isinstance(meta, dict) else []

        headers: List[str] = []
        seen = set()

        def add(header: str) -> None:
            if header in seen:
                return
            seen.add(header)
            if header in meta_headers or self.columns is None or header in self.columns:
                headers.append(header)

        for header in meta_headers:
            add(header)
        for header in self.schema_fields:
            add(header)
        for row in rows:
            for header in row:
                add(header)

        return headers


def render_cell(value: Any) -> Optional[str]:
    """
    Render a flat value as CSV text.

    None stays null (written empty); booleans are "true"/"false"; floats
    with no fractional part drop the ".0".
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
