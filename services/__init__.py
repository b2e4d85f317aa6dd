"""
Business logic services.

Each service handles one domain area.
"""

from services.review_ingestion_service import (
    ReviewIngestionService,
    get_review_ingestion_service,
    UploadStage,
    UnconfirmedUpload,
    ConfirmedUpload,
    NormalizedUpload,
)

__all__ = [
    "ReviewIngestionService",
    "get_review_ingestion_service",
    "UploadStage",
    "UnconfirmedUpload",
    "ConfirmedUpload",
    "NormalizedUpload",
]
