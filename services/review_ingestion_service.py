"""
Review upload workflow.

Models the human-in-the-loop flow as an explicit state sequence:

    UnconfirmedUpload  --confirm()-->  ConfirmedUpload  --normalize()-->  NormalizedUpload

Only a ConfirmedUpload can be normalized, so reviews are never produced
from a mapping nobody approved.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import structlog

from models.review_csv import (
    ColumnMapping,
    ConfirmedMapping,
    ConfirmMappingRequest,
    DetectedVariation,
    IngestionResult,
    VariationOverride,
)
from parsers.csv_reader import parse_csv_text
from parsers.column_classifier import classify_columns
from parsers.preview import build_preview
from parsers.review_normalizer import confirm_mapping, normalize_reviews
from parsers.variation_detector import detect_variations
from exceptions import CSVStructureError, EmptyCSVError

logger = structlog.get_logger(__name__)

# Review text, rating and date each need a column
MIN_COLUMNS = 3


class UploadStage(str, Enum):
    """Where an upload is in the confirmation workflow."""
    UNCONFIRMED = "unconfirmed"   # Columns detected, waiting for the user
    CONFIRMED = "confirmed"       # User approved a mapping
    NORMALIZED = "normalized"     # Reviews produced


@dataclass(frozen=True)
class NormalizedUpload:
    """Final stage: the ingestion result for a confirmed upload."""
    mapping: ConfirmedMapping
    result: IngestionResult
    stage: UploadStage = field(default=UploadStage.NORMALIZED, init=False)


@dataclass(frozen=True)
class ConfirmedUpload:
    """Upload whose mapping was approved; ready to normalize."""
    records: tuple[dict[str, str], ...]
    mapping: ConfirmedMapping
    overrides: dict[str, VariationOverride] = field(default_factory=dict)
    stage: UploadStage = field(default=UploadStage.CONFIRMED, init=False)

    def normalize(self) -> NormalizedUpload:
        """Run the normalizer over every record."""
        result = normalize_reviews(self.records, self.mapping, self.overrides)
        return NormalizedUpload(mapping=self.mapping, result=result)


@dataclass(frozen=True)
class UnconfirmedUpload:
    """Parsed upload with a proposed mapping, waiting for the user."""
    headers: tuple[str, ...]
    records: tuple[dict[str, str], ...]
    detected_columns: ColumnMapping
    detected_variations: tuple[DetectedVariation, ...] = ()
    preview: tuple[dict[str, str], ...] = ()
    errors: tuple[str, ...] = ()
    stage: UploadStage = field(default=UploadStage.UNCONFIRMED, init=False)

    @property
    def is_valid(self) -> bool:
        """True if no structural or parse problems were found."""
        return len(self.errors) == 0

    @property
    def total_rows(self) -> int:
        return len(self.records)


class ReviewIngestionService:
    """
    Runs uploads through analyze → confirm → normalize.

    Stateless: every call works only on its arguments.
    """

    def analyze(self, text: str) -> UnconfirmedUpload:
        """
        Parse an upload and propose a mapping.

        Structural problems (parse errors, empty or duplicate headers, too
        few columns) are reported on the result instead of raised, so the
        user still sees the preview.

        Raises:
            CSVParseError: If the content cannot be read at all
            EmptyCSVError: If there is no data row
        """
        parsed = parse_csv_text(text)

        if not parsed.has_data:
            logger.info("upload_rejected", reason="no_data_rows")
            raise EmptyCSVError()

        errors = list(parsed.errors) + find_structural_errors(parsed.headers)
        detected = classify_columns(parsed.headers)
        variations = detect_variations(parsed.records, detected)

        upload = UnconfirmedUpload(
            headers=tuple(parsed.headers),
            records=tuple(parsed.records),
            detected_columns=detected,
            detected_variations=tuple(variations),
            preview=tuple(build_preview(parsed.records)),
            errors=tuple(errors),
        )

        logger.info(
            "upload_analyzed",
            total_rows=upload.total_rows,
            is_valid=upload.is_valid,
            error_count=len(errors),
            variation_count=len(variations),
        )

        return upload

    def confirm(
        self,
        upload: UnconfirmedUpload,
        request: ConfirmMappingRequest,
    ) -> ConfirmedUpload:
        """
        Approve a mapping for an analyzed upload.

        Raises:
            CSVStructureError: If the upload failed structural checks
            MappingColumnNotFoundError: If the mapping names unknown headers
        """
        if not upload.is_valid:
            logger.info("confirm_rejected", reason="invalid_structure")
            raise CSVStructureError(list(upload.errors))

        mapping = confirm_mapping(
            upload.headers,
            review_text=request.review_text,
            rating=request.rating,
            date=request.date,
            variation_id=request.variation_id,
            variation_name=request.variation_name,
        )

        logger.info(
            "mapping_confirmed",
            review_text=mapping.review_text,
            rating=mapping.rating,
            date=mapping.date,
            variation_id=mapping.variation_id,
            variation_name=mapping.variation_name,
            override_count=len(request.variations),
        )

        return ConfirmedUpload(
            records=upload.records,
            mapping=mapping,
            overrides=dict(request.variations),
        )

    def process(self, text: str, request: ConfirmMappingRequest) -> NormalizedUpload:
        """One-shot confirm-and-process for callers that already hold a mapping."""
        upload = self.analyze(text)
        return self.confirm(upload, request).normalize()


def find_structural_errors(headers: list[str]) -> list[str]:
    """Header problems that make an upload unsafe to confirm."""
    errors: list[str] = []

    empty = [h for h in headers if not h or not h.strip()]
    if empty:
        errors.append(
            f"Found {len(empty)} empty column header(s). All columns must have names."
        )

    seen: set[str] = set()
    duplicates: list[str] = []
    for header in headers:
        if header and header in seen and header not in duplicates:
            duplicates.append(header)
        seen.add(header)
    if duplicates:
        errors.append(f"Found duplicate column headers: {', '.join(duplicates)}")

    if len(headers) < MIN_COLUMNS:
        errors.append(
            f"CSV must have at least {MIN_COLUMNS} columns (review text, rating, date)"
        )

    return errors


# =============================================================================
# Singleton
# =============================================================================

_review_ingestion_service: Optional[ReviewIngestionService] = None


def get_review_ingestion_service() -> ReviewIngestionService:
    """Get or create ReviewIngestionService instance."""
    global _review_ingestion_service
    if _review_ingestion_service is None:
        _review_ingestion_service = ReviewIngestionService()
    return _review_ingestion_service
