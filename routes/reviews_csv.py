"""
Review CSV ingestion routes.

Two-stage flow:
    1. POST /analyze uploads a CSV, returns detected columns, detected
       variations, a short preview and a preview_id. Nothing is committed.
    2. POST /confirm/{preview_id} submits the user-approved mapping (and
       optional variation renames) and returns the normalized reviews.

POST /process does both in one call for clients that already hold a
confirmed mapping. POST /preflight is the cheap plausibility check.
"""

from fastapi import APIRouter, UploadFile, File, Form
from pydantic import ValidationError as PydanticValidationError
import structlog

from config import settings
from models.review_csv import (
    ColumnMapping,
    ConfirmMappingRequest,
    DetectColumnsRequest,
    IngestionResult,
    PreflightResult,
    UploadAnalysisResponse,
)
from parsers.csv_reader import decode_csv_content
from parsers.column_classifier import classify_columns
from parsers.preflight import preflight
from services import preview_cache_service
from services.review_ingestion_service import (
    UnconfirmedUpload,
    get_review_ingestion_service,
)
from exceptions import (
    FileTooLargeError,
    PreviewNotFoundError,
    UnsupportedFileTypeError,
    ValidationError,
)

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/reviews/csv", tags=["Review CSV Ingestion"])


async def _read_upload(file: UploadFile) -> str:
    """
    Read an uploaded CSV into text, enforcing type and size limits.

    Raises:
        UnsupportedFileTypeError: Content type not CSV-like
        FileTooLargeError: Larger than settings.max_upload_mb
        CSVParseError: Not UTF-8
    """
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type and content_type not in settings.allowed_content_types:
        raise UnsupportedFileTypeError(file.content_type, settings.allowed_content_types)

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        logger.warning(
            "csv_upload_too_large",
            filename=file.filename,
            size_bytes=len(content),
        )
        raise FileTooLargeError(len(content), settings.max_upload_bytes)

    return decode_csv_content(content)


def _parse_mapping_form(mapping: str) -> ConfirmMappingRequest:
    """Parse the JSON mapping sent as a multipart form field."""
    try:
        return ConfirmMappingRequest.model_validate_json(mapping)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Invalid column mapping",
            code="MAPPING_INVALID",
            details={"errors": e.errors(include_url=False, include_context=False)}
        )


# ===================
# ROUTES
# ===================

@router.post("/detect-columns", response_model=ColumnMapping)
async def detect_columns(data: DetectColumnsRequest) -> ColumnMapping:
    """
    Propose a column mapping from header names alone.

    review_text always resolves when at least one header is given.
    """
    return classify_columns(data.headers)


@router.post("/preflight", response_model=PreflightResult)
async def preflight_upload(file: UploadFile = File(...)) -> PreflightResult:
    """
    Check that a CSV is plausible before asking the user for a mapping.

    Content problems are reported with is_valid=false, not as HTTP errors.
    """
    logger.info("csv_preflight_started", filename=file.filename)
    text = await _read_upload(file)
    return preflight(text)


@router.post("/analyze", response_model=UploadAnalysisResponse)
async def analyze_upload(file: UploadFile = File(...)) -> UploadAnalysisResponse:
    """
    Parse a CSV, detect columns and variations, and cache it for confirmation.

    Returns:
        UploadAnalysisResponse with preview_id for /confirm/{preview_id}

    Raises:
        422: Unreadable or empty CSV
    """
    logger.info(
        "csv_analyze_started",
        filename=file.filename,
        content_type=file.content_type
    )

    text = await _read_upload(file)
    upload = get_review_ingestion_service().analyze(text)
    preview_id = preview_cache_service.store_preview(upload)

    logger.info(
        "csv_analyze_cached",
        preview_id=preview_id,
        total_rows=upload.total_rows,
        is_valid=upload.is_valid
    )

    return UploadAnalysisResponse(
        preview_id=preview_id,
        is_valid=upload.is_valid,
        errors=list(upload.errors),
        detected_columns=upload.detected_columns,
        detected_variations=list(upload.detected_variations),
        preview=list(upload.preview),
        total_rows=upload.total_rows,
        needs_confirmation=True,
    )


@router.post("/confirm/{preview_id}", response_model=IngestionResult)
async def confirm_upload(preview_id: str, data: ConfirmMappingRequest) -> IngestionResult:
    """
    Confirm the mapping for a previously analyzed upload and normalize it.

    The cached upload is deleted once normalization succeeds.

    Raises:
        404: Preview not found or expired
        422: Mapping references unknown columns, or upload structure invalid
    """
    logger.info("csv_confirm_started", preview_id=preview_id)

    upload = preview_cache_service.retrieve_preview(preview_id)
    if not isinstance(upload, UnconfirmedUpload):
        raise PreviewNotFoundError(preview_id)

    service = get_review_ingestion_service()
    normalized = service.confirm(upload, data).normalize()

    preview_cache_service.delete_preview(preview_id)

    logger.info(
        "csv_confirm_completed",
        preview_id=preview_id,
        total_rows=normalized.result.total_rows,
        valid_rows=normalized.result.valid_rows
    )

    return normalized.result


@router.post("/process", response_model=IngestionResult)
async def process_upload(
    file: UploadFile = File(...),
    mapping: str = Form(..., description="ConfirmMappingRequest as JSON"),
) -> IngestionResult:
    """
    Confirm-and-process in one call.

    Raises:
        422: Invalid mapping JSON, unknown columns, unreadable or empty CSV
    """
    logger.info("csv_process_started", filename=file.filename)

    request = _parse_mapping_form(mapping)
    text = await _read_upload(file)
    normalized = get_review_ingestion_service().process(text, request)

    logger.info(
        "csv_process_completed",
        total_rows=normalized.result.total_rows,
        valid_rows=normalized.result.valid_rows
    )

    return normalized.result


@router.delete("/preview/{preview_id}")
async def cancel_upload(preview_id: str) -> dict:
    """
    Discard an analyzed upload without processing it.

    Raises:
        404: Preview not found or expired
    """
    if not preview_cache_service.delete_preview(preview_id):
        raise PreviewNotFoundError(preview_id)
    logger.info("csv_preview_cancelled", preview_id=preview_id)
    return {"success": True, "preview_id": preview_id}
