"""
Tests for CSV emitter.

Validates:
- Exact header order (metadata, schema fields, drift)
- Row counts for the three templates
- Blank-out of continuation rows
- Cell rendering, UTF-8, LF line endings
- Column filtering
"""
import io

import polars as pl
import pytest

from formexport.export.csv_emitter import CSVEmitter, render_cell
from formexport.schemas.export import ExportTemplate


@pytest.fixture
def records():
    """Two reshaped submissions, the first with two grid rows."""
    return [
        {
            "form": {"confirmationId": "C-1", "version": 1},
            "name": "Ann",
            "pets": [{"kind": "cat"}, {"kind": "dog"}],
        },
        {
            "form": {"confirmationId": "C-2", "version": 1},
            "name": "Bob",
            "pets": [{"kind": "eel"}],
        },
    ]


@pytest.fixture
def emitter():
    return CSVEmitter(["name", "pets.kind"])


def _read(data: bytes) -> pl.DataFrame:
    return pl.read_csv(io.BytesIO(data), infer_schema_length=0)


def test_emit_filled(emitter, records):
    """Continuation rows repeat every other value."""
    data = emitter.emit(records, ExportTemplate.FLATTENED_WITH_FILLED)

    assert data.decode("utf-8") == (
        "form.confirmationId,form.version,name,pets.kind\n"
        "C-1,1,Ann,cat\n"
        "C-1,1,Ann,dog\n"
        "C-2,1,Bob,eel\n"
    )


def test_emit_blank_out(emitter, records):
    """Continuation rows only keep the unwound columns."""
    data = emitter.emit(records, ExportTemplate.FLATTENED_WITH_BLANK_OUT)

    assert data.decode("utf-8") == (
        "form.confirmationId,form.version,name,pets.kind\n"
        "C-1,1,Ann,cat\n"
        ",,,dog\n"
        "C-2,1,Bob,eel\n"
    )


def test_blank_out_and_filled_have_same_row_count(emitter):
    records = [
        {"form": {"confirmationId": "C-1"}, "a": [1, 2], "b": ["x", "y", "z"], "c": "keep"},
        {"form": {"confirmationId": "C-2"}, "a": [], "c": "keep"},
    ]

    filled = _read(emitter.emit(records, ExportTemplate.FLATTENED_WITH_FILLED))
    blank = _read(emitter.emit(records, ExportTemplate.FLATTENED_WITH_BLANK_OUT))

    assert len(filled) == len(blank) == 7
    assert filled.columns == blank.columns

    # Unwound columns match row for row; the rest differ only by blanks
    for column in filled.columns:
        for filled_value, blank_value in zip(filled[column].to_list(), blank[column].to_list()):
            if column in ("a", "b"):
                assert filled_value == blank_value
            else:
                assert blank_value in (filled_value, None)


def test_unflattened_one_row_per_submission(emitter, records):
    data = emitter.emit(records, ExportTemplate.UNFLATTENED)
    df = _read(data)

    assert len(df) == len(records)
    assert df.columns == [
        "form.confirmationId",
        "form.version",
        "name",
        "pets.kind",
        "pets.0.kind",
        "pets.1.kind",
    ]
    assert df.row(0) == ("C-1", "1", "Ann", None, "cat", "dog")


def test_schema_drift_headers_follow_schema_fields():
    emitter = CSVEmitter(["b", "a"])
    records = [
        {"form": {"confirmationId": "C-1"}, "extra": 1, "a": "x"},
        {"form": {"confirmationId": "C-2"}, "b": "y", "late": True},
    ]

    df = _read(emitter.emit(records, ExportTemplate.FLATTENED_WITH_FILLED))

    assert df.columns == ["form.confirmationId", "b", "a", "extra", "late"]


def test_columns_filter_keeps_meta_headers(records):
    emitter = CSVEmitter(["name", "pets.kind"], columns=["pets.kind"])

    df = _read(emitter.emit(records, ExportTemplate.FLATTENED_WITH_FILLED))

    assert df.columns == ["form.confirmationId", "form.version", "pets.kind"]
    assert df["pets.kind"].to_list() == ["cat", "dog", "eel"]


def test_no_records_writes_schema_header_only(emitter):
    data = emitter.emit([], ExportTemplate.FLATTENED_WITH_FILLED)

    assert data == b"name,pets.kind\n"


def test_no_headers_writes_nothing():
    assert CSVEmitter([]).emit([], ExportTemplate.UNFLATTENED) == b""


def test_quoting_and_utf8():
    emitter = CSVEmitter(["note", "city"])
    records = [{"form": {}, "note": 'says "hi", twice', "city": "Zürich"}]

    data = emitter.emit(records, ExportTemplate.UNFLATTENED)

    assert data.decode("utf-8") == 'note,city\n"says ""hi"", twice",Zürich\n'
    assert b"\r\n" not in data


@pytest.mark.parametrize("value,expected", [
    (None, None),
    (True, "true"),
    (False, "false"),
    (3, "3"),
    (40.0, "40"),
    (2.5, "2.5"),
    ("text", "text"),
])
def test_render_cell(value, expected):
    assert render_cell(value) == expected
