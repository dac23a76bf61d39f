"""
Download names for exports: "<slug of form name>_<type>.<format>".
"""
import re
import unicodedata
from typing import Any


def slug(value: Any, max_length: int = 64) -> str:
    """
    File-name-safe, lowercase ASCII form of value.

    Accents are transliterated, any run of other characters becomes a single
    underscore, and the result is capped at max_length. slug(slug(x)) == slug(x).

    Examples:
        slug("José's Form") → "jose_s_form"
    """
    if not value:
        return ""

    ascii_text = unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode("ascii")
    s = re.sub(r"[^a-z0-9]+", "_", ascii_text.lower()).strip("_")
    return s[:max_length].rstrip("_")


def export_filename(form_name: Any, export_type: str, export_format: str) -> str:
    """
    Suggested download name for an export.

    Falls back to "form" when the name has no ASCII-representable characters.

    Examples:
        export_filename("Test Form", "submissions", "csv") → "test_form_submissions.csv"
    """
    base = slug(form_name) or "form"
    return f"{base}_{export_type}.{export_format}".lower()
