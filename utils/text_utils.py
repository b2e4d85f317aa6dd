"""
Text utilities for CSV headers and cells.

Used by the column classifier and the naive preflight splitter.
"""

from typing import Optional


def normalize_header(header: Optional[str]) -> str:
    """
    Normalize a header name for case-insensitive substring matching.

    - "  Star Rating " → "star rating"
    - None → ""

    Args:
        header: Raw header name

    Returns:
        Lowercased, stripped header
    """
    if not header:
        return ""
    return str(header).strip().lower()


def strip_quotes(token: Optional[str]) -> str:
    """
    Strip surrounding whitespace and double quotes from a naively split cell.

    - ' "Review Text" ' → 'Review Text'
    - '""' → ''

    Args:
        token: One comma-split fragment of a CSV line

    Returns:
        Cleaned value (never None)
    """
    if not token:
        return ""
    return token.strip().strip('"').strip()


def split_naive_csv_line(line: str) -> list[str]:
    """
    Split a CSV line on every comma, ignoring quoting rules.

    Only suitable for previews: quoted commas split the field.
    """
    return [strip_quotes(part) for part in line.split(",")]
