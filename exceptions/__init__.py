"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,

    # CSV parser
    CSVParseError,
    EmptyCSVError,
    CSVStructureError,

    # Column mapping
    MappingColumnNotFoundError,
    MappingNotConfirmedError,

    # Uploads
    PreviewNotFoundError,
    FileTooLargeError,
    UnsupportedFileTypeError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",

    # CSV parser
    "CSVParseError",
    "EmptyCSVError",
    "CSVStructureError",

    # Column mapping
    "MappingColumnNotFoundError",
    "MappingNotConfirmedError",

    # Uploads
    "PreviewNotFoundError",
    "FileTooLargeError",
    "UnsupportedFileTypeError",
]
