"""
Column classifier for review CSV uploads.

Proposes which raw headers hold the review text, rating, date and product
variation, using ordered lists of lowercase substring candidates.

Matching policy:
    For each field, candidates are tried in priority order. The first
    candidate contained (case-insensitively) in any header wins, and the
    first header in header order containing it is selected.

    By default matching is NON-EXCLUSIVE: a header already chosen for one
    field may be chosen again for another ("Date Rated" satisfies both the
    date candidate "date" and the rating candidate "rate"). The user
    corrects such collisions on the confirmation screen. The single
    exception is variation_name, which never reuses the variation_id header.

    Pass exclusive=True to skip headers already claimed by an earlier field
    (order: review_text, rating, date, variation_id, variation_name).
"""

from typing import Optional, Sequence
import structlog

from models.review_csv import ColumnMapping
from utils.text_utils import normalize_header

logger = structlog.get_logger(__name__)


# ===================
# CANDIDATE TABLES
# ===================

REVIEW_TEXT_CANDIDATES: tuple[str, ...] = (
    "review",
    "text",
    "comment",
    "feedback",
    "content",
    "message",
    "review_text",
    "reviewtext",
    "customer_review",
    "review_content",
    "body",
)

RATING_CANDIDATES: tuple[str, ...] = (
    "rating",
    "score",
    "stars",
    "star",
    "rate",
    "star_rating",
    "customer_rating",
    "product_rating",
    "overall",
)

DATE_CANDIDATES: tuple[str, ...] = (
    "date",
    "time",
    "created",
    "posted",
    "timestamp",
    "review_date",
    "created_at",
    "posted_at",
    "date_posted",
    "reviewed_on",
)

# Columns holding opaque variation codes
VARIATION_ID_CANDIDATES: tuple[str, ...] = (
    "asin",
    "sku",
    "code",
    "ref",
    "reference",
    "item_id",
    "product_id",
    "variant_id",
    "variation_id",
    "model_id",
    "style_id",
    "variation",
)

# Columns holding human-readable variation names
VARIATION_NAME_CANDIDATES: tuple[str, ...] = (
    "size",
    "color",
    "model",
    "style",
    "variant",
    "type",
    "category",
    "variation",
    "flavor",
)


def find_column(
    headers: Sequence[str],
    candidates: Sequence[str],
    excluded: Optional[set[str]] = None,
) -> Optional[str]:
    """
    Return the header matched by the highest-priority candidate.

    Args:
        headers: Header names in file order
        candidates: Lowercase substrings, highest priority first
        excluded: Headers that may not be selected

    Returns:
        Matching header as written in the file, or None
    """
    excluded = excluded or set()
    lowered = [normalize_header(h) for h in headers]

    for candidate in candidates:
        for header, lower in zip(headers, lowered):
            if header in excluded:
                continue
            if candidate in lower:
                return header
    return None


def classify_columns(headers: Sequence[str], exclusive: bool = False) -> ColumnMapping:
    """
    Propose a column mapping from header names alone.

    review_text falls back to the first header when no candidate matches, so
    a mapping is always produced for a non-empty header list. The other
    fields stay unset when nothing matches.

    Args:
        headers: Header names in file order
        exclusive: Skip headers already claimed by an earlier field

    Returns:
        ColumnMapping with detected fields and the leftover headers
    """
    headers = list(headers)
    claimed: set[str] = set()

    def _pick(candidates: Sequence[str], also_excluded: Optional[str] = None) -> Optional[str]:
        excluded = set(claimed) if exclusive else set()
        if also_excluded:
            excluded.add(also_excluded)
        header = find_column(headers, candidates, excluded)
        if header is not None:
            claimed.add(header)
        return header

    review_text = _pick(REVIEW_TEXT_CANDIDATES)
    if review_text is None and headers:
        review_text = headers[0]
        claimed.add(review_text)
        logger.debug("review_text_fallback_to_first_header", header=review_text)

    rating = _pick(RATING_CANDIDATES)
    date = _pick(DATE_CANDIDATES)
    variation_id = _pick(VARIATION_ID_CANDIDATES)
    variation_name = _pick(VARIATION_NAME_CANDIDATES, also_excluded=variation_id)

    mapped = {h for h in (review_text, rating, date, variation_id, variation_name) if h}
    unmapped = [h for h in headers if h not in mapped]

    logger.info(
        "columns_classified",
        header_count=len(headers),
        review_text=review_text,
        rating=rating,
        date=date,
        variation_id=variation_id,
        variation_name=variation_name,
        exclusive=exclusive,
    )

    return ColumnMapping(
        review_text=review_text,
        rating=rating,
        date=date,
        variation_id=variation_id,
        variation_name=variation_name,
        unmapped_columns=unmapped,
    )
