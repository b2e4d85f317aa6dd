"""
Confirmed-mapping normalizer.

Converts raw CSV records into CanonicalReview objects using a mapping the
user has confirmed. Each row is validated on its own: a bad row becomes a
RowError and processing continues with the next row.

Row numbers in errors count the header row, so the first data row is 2.

When a variation override applies, the keys originalVariationName and
variationDescription are written into metadata and replace a source
column of the same name.
"""

from datetime import datetime
from typing import Mapping, Optional, Sequence
import math
import re
import structlog

import pandas as pd

from exceptions import MappingColumnNotFoundError, MappingNotConfirmedError
from models.review_csv import (
    CanonicalReview,
    ConfirmedMapping,
    IngestionResult,
    RowError,
    VariationOverride,
    VariationStats,
)

logger = structlog.get_logger(__name__)

MIN_TEXT_LENGTH = 5
RATING_MIN = 1.0
RATING_MAX = 5.0

# Metadata keys written when a variation override applies
ORIGINAL_VARIATION_KEY = "originalVariationName"
VARIATION_DESCRIPTION_KEY = "variationDescription"

TEXT_MISSING = "Review text is missing"
TEXT_TOO_SHORT = f"Review text is too short (minimum {MIN_TEXT_LENGTH} characters)"
INVALID_RATING = "Invalid rating value"
INVALID_DATE = "Invalid date value"

# Dates must carry a year; relative words depend on the clock
_YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")
_NUMERIC_DATE_RE = re.compile(r"\b\d{1,2}[/.-]\d{1,2}[/.-]\d{2}\b")
_RELATIVE_DATE_RE = re.compile(r"\b(now|today|tomorrow|yesterday)\b", re.IGNORECASE)


class RowValidationError(Exception):
    """Raised inside row processing; becomes a RowError."""
    pass


def confirm_mapping(
    headers: Sequence[str],
    review_text: str,
    rating: str,
    date: str,
    variation_id: Optional[str] = None,
    variation_name: Optional[str] = None,
) -> ConfirmedMapping:
    """
    Turn user-approved header choices into a ConfirmedMapping for one batch.

    Args:
        headers: Headers of the uploaded file
        review_text, rating, date: Required header names
        variation_id, variation_name: Optional header names

    Returns:
        ConfirmedMapping

    Raises:
        MappingColumnNotFoundError: If any referenced header is not in headers
    """
    available = set(headers)
    requested = {
        "review_text": review_text,
        "rating": rating,
        "date": date,
        "variation_id": variation_id,
        "variation_name": variation_name,
    }
    missing = {
        field: header
        for field, header in requested.items()
        if header and header not in available
    }
    if missing:
        logger.warning("mapping_columns_missing", missing=missing)
        raise MappingColumnNotFoundError(missing, list(headers))

    return ConfirmedMapping(**requested)


def normalize_reviews(
    records: Sequence[Mapping[str, str]],
    mapping: ConfirmedMapping,
    overrides: Optional[Mapping[str, VariationOverride]] = None,
) -> IngestionResult:
    """
    Normalize raw records with a confirmed mapping.

    Args:
        records: Header-keyed raw rows, in file order
        mapping: Mapping produced by confirm_mapping()
        overrides: Optional display name/description per raw variation value

    Returns:
        IngestionResult with every valid review and one RowError per bad row

    Raises:
        MappingNotConfirmedError: If mapping is not a ConfirmedMapping
    """
    if not isinstance(mapping, ConfirmedMapping):
        raise MappingNotConfirmedError(type(mapping).__name__)

    overrides = overrides or {}
    mapped_headers = mapping.mapped_headers()

    reviews: list[CanonicalReview] = []
    errors: list[RowError] = []
    variation_stats: dict[str, VariationStats] = {}

    for idx, record in enumerate(records):
        row_num = idx + 2  # 1-indexed + header

        try:
            review = _normalize_row(record, mapping, mapped_headers, overrides)
        except RowValidationError as e:
            errors.append(RowError(row=row_num, reason=str(e)))
            continue

        reviews.append(review)

        if review.product_variation:
            stats = variation_stats.get(review.product_variation)
            if stats is None:
                stats = VariationStats(
                    count=0,
                    description=review.metadata.get(VARIATION_DESCRIPTION_KEY),
                )
                variation_stats[review.product_variation] = stats
            stats.count += 1

    logger.info(
        "reviews_normalized",
        total_rows=len(records),
        valid_rows=len(reviews),
        error_count=len(errors),
        variation_count=len(variation_stats),
    )

    return IngestionResult(
        reviews=reviews,
        total_rows=len(records),
        valid_rows=len(reviews),
        errors=errors,
        variations=variation_stats or None,
    )


def _normalize_row(
    record: Mapping[str, str],
    mapping: ConfirmedMapping,
    mapped_headers: set[str],
    overrides: Mapping[str, VariationOverride],
) -> CanonicalReview:
    """
    Build one CanonicalReview.

    Raises:
        RowValidationError: On the first required field that fails
    """
    text = (record.get(mapping.review_text) or "").strip()
    if not text:
        raise RowValidationError(TEXT_MISSING)
    if len(text) < MIN_TEXT_LENGTH:
        raise RowValidationError(TEXT_TOO_SHORT)

    rating = parse_rating(record.get(mapping.rating))
    if rating is None:
        raise RowValidationError(INVALID_RATING)

    review_date = parse_review_date(record.get(mapping.date))
    if review_date is None:
        raise RowValidationError(INVALID_DATE)

    metadata = {
        key: value
        for key, value in record.items()
        if key not in mapped_headers
    }

    product_variation = _raw_variation(record, mapping)
    if product_variation and product_variation in overrides:
        override = overrides[product_variation]
        if override.name and override.name != product_variation:
            metadata[ORIGINAL_VARIATION_KEY] = product_variation
        if override.description:
            metadata[VARIATION_DESCRIPTION_KEY] = override.description
        product_variation = override.name or product_variation

    return CanonicalReview(
        text=text,
        rating=rating,
        date=review_date,
        product_variation=product_variation,
        metadata=metadata,
    )


def _raw_variation(record: Mapping[str, str], mapping: ConfirmedMapping) -> Optional[str]:
    """Variation name cell if present, else variation id cell, else None."""
    for header in (mapping.variation_name, mapping.variation_id):
        if not header:
            continue
        value = (record.get(header) or "").strip()
        if value:
            return value
    return None


# ===================
# HELPER FUNCTIONS
# ===================

def parse_rating(value: Optional[str]) -> Optional[float]:
    """
    Parse a rating cell and clamp it to [1, 5].

    Out-of-range values are clamped silently.
    Returns None for empty, non-numeric, digit-grouped ("1_0") or
    non-finite (nan, inf) input.
    """
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    if "_" in text:
        return None
    try:
        rating = float(text)
    except ValueError:
        return None
    if not math.isfinite(rating):
        return None
    return max(RATING_MIN, min(RATING_MAX, rating))


def parse_review_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a date cell into a timezone-aware datetime.

    The value must name a year, either as four digits ("2024-01-15",
    "Jan 5, 2024") or as a numeric day/month/year ("1/15/24"). Relative
    words ("now", "today") and bare times ("10:30") resolve against the
    clock, and a bare month ("March") lands in year 1, so they are rejected.

    Otherwise accepts whatever pandas.to_datetime accepts. Naive values are
    read as UTC; offset-bearing values are converted to UTC.
    Returns None for empty, rejected or unparseable input.
    """
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    if _RELATIVE_DATE_RE.search(text):
        return None
    if not (_YEAR_RE.search(text) or _NUMERIC_DATE_RE.search(text)):
        return None
    try:
        parsed = pd.to_datetime(text, utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()
