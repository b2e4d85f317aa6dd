"""
Structural preflight for review CSV uploads.

A cheap "is this file plausible" gate run before the user is asked to
confirm a column mapping. It splits lines naively on commas and never
coerces values, so it must not be used as the correctness gate for final
processing (that is the normalizer's job).
"""

import structlog

from models.review_csv import PreflightResult
from parsers.preview import PREVIEW_ROW_LIMIT, build_preview
from utils.text_utils import split_naive_csv_line

logger = structlog.get_logger(__name__)

# Small fixed set; the classifier's table is broader on purpose
REVIEW_LIKE_CANDIDATES: tuple[str, ...] = (
    "review",
    "text",
    "comment",
    "feedback",
    "content",
)

TOO_FEW_LINES_MESSAGE = "CSV file must have a header row and at least one data row"
MISSING_REVIEW_COLUMN_MESSAGE = (
    "Missing required column: review text (e.g., "
    + ", ".join(f"'{c}'" for c in REVIEW_LIKE_CANDIDATES)
    + ")"
)


def preflight(raw_text: str) -> PreflightResult:
    """
    Decide whether a raw CSV is worth showing on the confirmation screen.

    Gates, in order (first failure wins):
        1. At least 2 non-blank lines
        2. Header line lowercased and split on commas
        3. Some header contains a review-like candidate
        4. Preview of the first 6 lines (header included)

    Args:
        raw_text: Full decoded CSV content

    Returns:
        PreflightResult; invalid results carry one message and no preview
    """
    lines = [line for line in (raw_text or "").splitlines() if line.strip()]

    if len(lines) < 2:
        logger.info("preflight_failed", reason="too_few_lines", line_count=len(lines))
        return PreflightResult(is_valid=False, errors=[TOO_FEW_LINES_MESSAGE], preview=[])

    headers = split_naive_csv_line(lines[0].lower())

    has_review_column = any(
        candidate in header
        for candidate in REVIEW_LIKE_CANDIDATES
        for header in headers
    )
    if not has_review_column:
        logger.info("preflight_failed", reason="no_review_column", headers=headers)
        return PreflightResult(is_valid=False, errors=[MISSING_REVIEW_COLUMN_MESSAGE], preview=[])

    rows = []
    for line in lines[1:PREVIEW_ROW_LIMIT]:
        values = split_naive_csv_line(line)
        rows.append({
            header: values[i] if i < len(values) else ""
            for i, header in enumerate(headers)
        })

    preview = build_preview(rows)

    logger.info("preflight_passed", header_count=len(headers), preview_rows=len(preview))

    return PreflightResult(is_valid=True, errors=[], preview=preview)
