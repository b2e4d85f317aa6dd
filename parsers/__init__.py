"""
CSV parsing, column detection and review normalization.
"""

from parsers.csv_reader import (
    parse_csv_text,
    decode_csv_content,
    CSVParseResult,
)
from parsers.column_classifier import (
    classify_columns,
    find_column,
)
from parsers.preflight import preflight
from parsers.preview import build_preview, PREVIEW_ROW_LIMIT
from parsers.review_normalizer import (
    confirm_mapping,
    normalize_reviews,
)
from parsers.variation_detector import (
    detect_variations,
    classify_variation_type,
    extract_attributes,
)

__all__ = [
    "parse_csv_text",
    "decode_csv_content",
    "CSVParseResult",
    "classify_columns",
    "find_column",
    "preflight",
    "build_preview",
    "PREVIEW_ROW_LIMIT",
    "confirm_mapping",
    "normalize_reviews",
    "detect_variations",
    "classify_variation_type",
    "extract_attributes",
]
