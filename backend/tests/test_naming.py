"""
Unit tests for export file naming.
"""
import pytest

from formexport.export.naming import export_filename, slug


class TestSlug:
    def test_simple(self):
        assert slug("Hello World") == "hello_world"

    def test_special_characters(self):
        assert slug("José's Form & Co.") == "jose_s_form_co"

    def test_idempotent(self):
        value = "  Ünïcode -- Form  "
        assert slug(slug(value)) == slug(value)

    def test_truncation(self):
        result = slug("a" * 100)
        assert len(result) == 64

    def test_empty(self):
        assert slug("") == ""
        assert slug(None) == ""


@pytest.mark.parametrize("name,export_type,export_format,expected", [
    ("Pet Survey", "submissions", "csv", "pet_survey_submissions.csv"),
    ("Pet Survey", "submissions", "json", "pet_survey_submissions.json"),
    ("Формa", "submissions", "csv", "a_submissions.csv"),
    ("日本語", "submissions", "csv", "form_submissions.csv"),
])
def test_export_filename(name, export_type, export_format, expected):
    assert export_filename(name, export_type, export_format) == expected
