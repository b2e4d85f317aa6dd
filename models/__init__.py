"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    FrozenSchema,
)
from models.review_csv import (
    RawRecord,
    VariationType,
    ColumnMapping,
    ConfirmedMapping,
    VariationOverride,
    ConfirmMappingRequest,
    DetectColumnsRequest,
    CanonicalReview,
    RowError,
    VariationStats,
    IngestionResult,
    DetectedVariation,
    PreflightResult,
    UploadAnalysisResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",

    # Review CSV
    "RawRecord",
    "VariationType",
    "ColumnMapping",
    "ConfirmedMapping",
    "VariationOverride",
    "ConfirmMappingRequest",
    "DetectColumnsRequest",
    "CanonicalReview",
    "RowError",
    "VariationStats",
    "IngestionResult",
    "DetectedVariation",
    "PreflightResult",
    "UploadAnalysisResponse",
]
