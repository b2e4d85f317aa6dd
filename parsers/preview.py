"""
Preview builder for the mapping confirmation screen.

Returns a small copy of the first rows so responses stay bounded and a
full dataset is never echoed back before the user commits.
"""

from typing import Iterable, Mapping

PREVIEW_ROW_LIMIT = 6


def build_preview(
    records: Iterable[Mapping[str, str]],
    limit: int = PREVIEW_ROW_LIMIT,
) -> list[dict[str, str]]:
    """
    Copy at most PREVIEW_ROW_LIMIT rows.

    A larger limit is ignored; a smaller one is honoured.
    """
    limit = max(0, min(limit, PREVIEW_ROW_LIMIT))
    preview: list[dict[str, str]] = []
    for record in records:
        if len(preview) >= limit:
            break
        preview.append(dict(record))
    return preview
