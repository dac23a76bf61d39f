"""
Export module for deterministic submission CSV/JSON generation.
"""
from formexport.export.naming import slug, export_filename
from formexport.export.records import (
    flatten_record,
    find_unwind_paths,
    unwind,
    reshape_record,
)
from formexport.export.csv_emitter import CSVEmitter, render_cell

__all__ = [
    "slug",
    "export_filename",
    "flatten_record",
    "find_unwind_paths",
    "unwind",
    "reshape_record",
    "CSVEmitter",
    "render_cell",
]
