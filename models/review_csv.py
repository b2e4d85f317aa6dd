"""
Review CSV ingestion models.

Data structures shared by the column classifier, the structural
validator, the confirmed-mapping normalizer and the upload API.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import Field, field_validator

from models.base import BaseSchema, FrozenSchema


# One parsed CSV data row: header -> raw cell value
RawRecord = dict[str, str]

VariationType = Literal["semantic", "non-semantic", "mixed"]


# ===================
# COLUMN MAPPINGS
# ===================

class ColumnMapping(BaseSchema):
    """
    Best-effort mapping proposed by the column classifier.

    Every field except review_text may be unset. review_text is only
    unset when the file has no headers at all.
    """

    review_text: Optional[str] = Field(None, description="Header holding the review body")
    rating: Optional[str] = Field(None, description="Header holding the star rating")
    date: Optional[str] = Field(None, description="Header holding the review date")
    variation_id: Optional[str] = Field(None, description="Header holding a variation code (SKU, ASIN...)")
    variation_name: Optional[str] = Field(None, description="Header holding a readable variation name")
    unmapped_columns: list[str] = Field(
        default_factory=list,
        description="Headers not claimed by any logical field"
    )


class ConfirmedMapping(FrozenSchema):
    """
    Column mapping a human has approved for one specific upload.

    Built by parsers.review_normalizer.confirm_mapping(), which checks every
    referenced header against the upload's headers.
    """

    review_text: str
    rating: str
    date: str
    variation_id: Optional[str] = None
    variation_name: Optional[str] = None

    def mapped_headers(self) -> set[str]:
        """Header names consumed by logical fields (excluded from metadata)."""
        return {
            header
            for header in (
                self.review_text,
                self.rating,
                self.date,
                self.variation_id,
                self.variation_name,
            )
            if header
        }


class VariationOverride(BaseSchema):
    """User-supplied rename/annotation for one raw variation value."""

    name: Optional[str] = Field(None, description="Display name replacing the raw value")
    description: Optional[str] = Field(None, description="Free-text note copied into metadata")


class ConfirmMappingRequest(BaseSchema):
    """
    Mapping submitted by the user after reviewing the detected columns.

    variations is keyed by the raw variation value as it appears in the file.
    """

    review_text: str = Field(..., min_length=1)
    rating: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    variation_id: Optional[str] = None
    variation_name: Optional[str] = None
    variations: dict[str, VariationOverride] = Field(default_factory=dict)

    @field_validator("variation_id", "variation_name", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat an empty selection as 'no variation column'."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class DetectColumnsRequest(BaseSchema):
    """Header list to classify."""

    headers: list[str] = Field(default_factory=list)


# ===================
# NORMALIZED OUTPUT
# ===================

class CanonicalReview(FrozenSchema):
    """Normalized, validated review ready for analysis."""

    text: str = Field(..., min_length=5)
    rating: float = Field(..., ge=1, le=5)
    date: datetime
    product_variation: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)


class RowError(FrozenSchema):
    """Row-level failure. Row numbers count the header row, so data starts at 2."""

    row: int = Field(..., ge=2)
    reason: str


class VariationStats(BaseSchema):
    """Per display-name review count for an ingested batch."""

    count: int = 0
    description: Optional[str] = None


class IngestionResult(BaseSchema):
    """Outcome of normalizing one upload. valid_rows always equals len(reviews)."""

    reviews: list[CanonicalReview] = Field(default_factory=list)
    total_rows: int = 0
    valid_rows: int = 0
    errors: list[RowError] = Field(default_factory=list)
    variations: Optional[dict[str, VariationStats]] = None


# ===================
# ANALYSIS / PREFLIGHT
# ===================

class DetectedVariation(BaseSchema):
    """Distinct variation value found under the detected variation columns."""

    id: Optional[str] = None
    name: str
    type: VariationType
    attributes: Optional[dict[str, str]] = None
    review_count: int = 0


class PreflightResult(BaseSchema):
    """Cheap plausibility check of a raw CSV before mapping confirmation."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    preview: list[dict[str, str]] = Field(default_factory=list)


class UploadAnalysisResponse(BaseSchema):
    """Analyzed upload waiting for the user to confirm its mapping."""

    preview_id: str
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    detected_columns: ColumnMapping
    detected_variations: list[DetectedVariation] = Field(default_factory=list)
    preview: list[dict[str, str]] = Field(default_factory=list)
    total_rows: int
    needs_confirmation: bool = True
