"""
Custom exception classes for the application.

Every error raised across the API boundary is an AppError so the
handler in main.py can render a consistent JSON body.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "CSV_PARSE_ERROR")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


# ===================
# CSV PARSER ERRORS
# ===================

class CSVParseError(ValidationError):
    """CSV content could not be decoded or read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CSV_PARSE_ERROR",
            message=message,
            details=details
        )


class EmptyCSVError(ValidationError):
    """CSV has no data rows."""

    def __init__(self):
        super().__init__(
            code="CSV_EMPTY",
            message="CSV file must have at least one data row"
        )


class CSVStructureError(ValidationError):
    """Upload failed structural checks and cannot be confirmed."""

    def __init__(self, errors: list[str]):
        super().__init__(
            code="CSV_STRUCTURE_INVALID",
            message=f"CSV structure is invalid ({len(errors)} problem(s))",
            details={"errors": errors}
        )


# ===================
# COLUMN MAPPING ERRORS
# ===================

class MappingColumnNotFoundError(ValidationError):
    """Mapping references headers that are not in the uploaded file."""

    def __init__(self, missing: dict[str, str], available: list[str]):
        fields = ", ".join(f"{field} -> '{header}'" for field, header in missing.items())
        super().__init__(
            code="MAPPING_COLUMN_NOT_FOUND",
            message=f"Mapped columns not found in file: {fields}",
            details={"missing": missing, "available": available}
        )


class MappingNotConfirmedError(ValidationError):
    """Normalization was requested with a mapping that was never confirmed."""

    def __init__(self, provided_type: str):
        super().__init__(
            code="MAPPING_NOT_CONFIRMED",
            message="Column mapping must be confirmed before reviews are normalized",
            details={"provided": provided_type}
        )


# ===================
# UPLOAD ERRORS
# ===================

class PreviewNotFoundError(NotFoundError):
    """Cached upload preview missing or expired."""

    def __init__(self, preview_id: str):
        super().__init__(
            resource="Upload preview",
            identifier=preview_id,
            code="PREVIEW_NOT_FOUND"
        )


class FileTooLargeError(AppError):
    """Upload exceeds the configured size ceiling (413)."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File size exceeds {limit_bytes // (1024 * 1024)}MB limit",
            status_code=413,
            details={"size_bytes": size_bytes, "limit_bytes": limit_bytes}
        )


class UnsupportedFileTypeError(AppError):
    """Upload content type is not CSV-like (415)."""

    def __init__(self, content_type: Optional[str], allowed: list[str]):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message="Only CSV files are accepted",
            status_code=415,
            details={"provided": content_type, "allowed": allowed}
        )
