"""
Product variation detection for review uploads.

Lists the distinct variation values found under the detected variation
columns so the user can rename or describe them before confirming.
Each value is tagged semantic (readable words like "Red" or "Large"),
non-semantic (codes like "B07XJ8C8F5") or mixed, and readable attributes
are pulled out where possible.
"""

from typing import Mapping, Optional, Sequence
import re
import structlog

from models.review_csv import ColumnMapping, DetectedVariation, VariationType

logger = structlog.get_logger(__name__)


SEMANTIC_PATTERNS: dict[str, tuple[str, ...]] = {
    "colors": (
        "red", "blue", "green", "black", "white", "yellow", "purple", "orange",
        "pink", "brown", "gray", "grey", "silver", "gold", "navy", "teal",
    ),
    "sizes": (
        "small", "medium", "large", "xl", "xxl", "xs", "tiny", "mini", "big",
        "petite", "plus", "regular", "tall", "short", "inch", "inches", '"',
        "cm", "mm", "size",
    ),
    "flavors": (
        "vanilla", "chocolate", "strawberry", "mint", "caramel", "coffee",
        "mocha", "cherry", "lemon", "orange", "apple", "grape", "berry",
        "flavor", "flavour", "taste",
    ),
    "materials": (
        "cotton", "polyester", "leather", "silk", "wool", "nylon", "rubber",
        "plastic", "metal", "wood", "glass", "steel", "aluminum", "copper",
    ),
    "models": (
        "model", "version", "edition", "series", "gen", "generation", "pro",
        "plus", "max", "mini", "air", "standard", "premium", "basic",
    ),
}

# Attribute name -> pattern group scanned for the first hit
_ATTRIBUTE_GROUPS = (
    ("color", "colors"),
    ("size", "sizes"),
    ("flavor", "flavors"),
    ("material", "materials"),
)

_CODE_RE = re.compile(r"^[A-Z0-9]{3,}$", re.IGNORECASE)
_MODEL_NUMBER_RE = re.compile(r"model\s*\d+", re.IGNORECASE)
_ID_WORD_RE = re.compile(r"sku|asin|id", re.IGNORECASE)
_PREFIXED_CODE_RE = re.compile(r"^[A-Z]{1,3}-?\d+", re.IGNORECASE)
_MEASUREMENT_RE = re.compile(r'(\d+)\s*(inch|inches|"|cm|mm)', re.IGNORECASE)
_MODEL_NAME_RE = re.compile(r"model\s*(\w+)", re.IGNORECASE)


def classify_variation_type(text: str) -> VariationType:
    """
    Score a variation value as readable words vs. opaque code.

    "Red / Large" → semantic, "B07XJ8C8F5" → non-semantic,
    "Model 3 Pro" → mixed.
    """
    lower = text.lower()

    semantic_score = sum(
        1
        for patterns in SEMANTIC_PATTERNS.values()
        for pattern in patterns
        if pattern in lower
    )

    non_semantic_score = 0
    if _CODE_RE.match(text):
        non_semantic_score += 2
    if _MODEL_NUMBER_RE.search(text):
        non_semantic_score += 1
    if _ID_WORD_RE.search(text):
        non_semantic_score += 1
    if _PREFIXED_CODE_RE.match(text):
        non_semantic_score += 1

    if semantic_score > 0 and non_semantic_score > 0:
        return "mixed"
    if semantic_score > non_semantic_score:
        return "semantic"
    return "non-semantic"


def extract_attributes(text: str) -> dict[str, str]:
    """
    Pull readable attributes out of a variation value.

    "Navy Cotton 12 inch" → {"color": "navy", "size": "12 inch", "material": "cotton"}
    """
    attributes: dict[str, str] = {}
    lower = text.lower()

    for attribute, group in _ATTRIBUTE_GROUPS:
        for pattern in SEMANTIC_PATTERNS[group]:
            if pattern in lower:
                attributes[attribute] = pattern
                break

    # Explicit measurements beat size words
    measurement = _MEASUREMENT_RE.search(text)
    if measurement:
        attributes["size"] = measurement.group(0)

    model = _MODEL_NAME_RE.search(text)
    if model:
        attributes["model"] = model.group(1)

    return attributes


def detect_variations(
    records: Sequence[Mapping[str, str]],
    mapping: ColumnMapping,
) -> list[DetectedVariation]:
    """
    Collect distinct variations with review counts, most reviewed first.

    The variation id cell is the key when present, else the name cell.
    The display name prefers the name cell.

    Args:
        records: Header-keyed raw rows
        mapping: Detected (or confirmed) columns; only variation fields are read

    Returns:
        DetectedVariation list sorted by review_count descending
    """
    if not mapping.variation_id and not mapping.variation_name:
        return []

    variations: dict[str, DetectedVariation] = {}
    counts: dict[str, int] = {}

    for record in records:
        key = _cell(record, mapping.variation_id)
        display = _cell(record, mapping.variation_name)
        if not key:
            key = display
        if not key:
            continue

        counts[key] = counts.get(key, 0) + 1

        if key not in variations:
            label = display or key
            attributes = extract_attributes(label)
            variations[key] = DetectedVariation(
                id=key if mapping.variation_id else None,
                name=label,
                type=classify_variation_type(label),
                attributes=attributes or None,
                review_count=0,
            )

    for key, variation in variations.items():
        variation.review_count = counts.get(key, 0)

    detected = sorted(variations.values(), key=lambda v: v.review_count, reverse=True)

    logger.info("variations_detected", variation_count=len(detected))

    return detected


def _cell(record: Mapping[str, str], header: Optional[str]) -> str:
    """Trimmed cell value, or empty string when header unset/missing."""
    if not header:
        return ""
    return (record.get(header) or "").strip()
