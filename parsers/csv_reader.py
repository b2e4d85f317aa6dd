"""
CSV reader for review uploads.

Turns raw upload bytes/text into header-keyed records. Quoted fields are
honoured, surrounding whitespace is trimmed from headers and cells, blank
lines are skipped. Lines with more fields than the header are reported as
parse errors instead of aborting the read; broken quoting aborts it.
"""

from dataclasses import dataclass, field
import csv
from io import StringIO
from typing import Union
import structlog

import pandas as pd

from exceptions import CSVParseError

logger = structlog.get_logger(__name__)


@dataclass
class CSVParseResult:
    """Result of reading a CSV file."""
    headers: list[str] = field(default_factory=list)
    records: list[dict[str, str]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no parse errors occurred."""
        return len(self.errors) == 0

    @property
    def has_data(self) -> bool:
        """True if at least one data row was read."""
        return len(self.records) > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "headers": list(self.headers),
            "records": [dict(r) for r in self.records],
            "errors": list(self.errors),
        }


def decode_csv_content(content: Union[bytes, str]) -> str:
    """
    Decode uploaded bytes as UTF-8, dropping a leading byte-order mark.

    Raises:
        CSVParseError: If the bytes are not valid UTF-8
    """
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning("csv_decode_failed", error=str(e))
        raise CSVParseError(
            message="CSV file must be UTF-8 encoded",
            details={"original_error": str(e)}
        )


def parse_csv_text(text: str) -> CSVParseResult:
    """
    Parse CSV text into header-keyed records.

    Args:
        text: Full CSV content, first line is the header row

    Returns:
        CSVParseResult with headers, records (str -> str) and parse errors

    Raises:
        CSVParseError: If the content cannot be tokenized (an unterminated
                       quoted field, or text right after a closing quote)
    """
    result = CSVParseResult()

    if not text or not text.strip():
        logger.debug("csv_empty_input")
        return result

    _check_quoting(text)

    bad_lines: list[list[str]] = []

    def _collect_bad_line(fields: list[str]) -> None:
        bad_lines.append(fields)
        return None  # skip the line

    try:
        df = pd.read_csv(
            StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
            skipinitialspace=True,
            engine="python",
            on_bad_lines=_collect_bad_line,
        )
    except pd.errors.EmptyDataError:
        logger.debug("csv_no_columns")
        return result
    except (pd.errors.ParserError, csv.Error, ValueError) as e:
        logger.error("csv_read_failed", error=str(e))
        raise CSVParseError(
            message="Failed to read CSV file",
            details={"original_error": str(e)}
        )

    rows = df.fillna("").values.tolist()
    if not rows:
        return result

    result.headers = [_clean_cell(h) for h in rows[0]]

    for line in rows[1:]:
        values = [_clean_cell(v) for v in line]
        # Rows made only of delimiters carry no data
        if not any(values):
            continue
        result.records.append(dict(zip(result.headers, values)))

    for fields in bad_lines:
        result.errors.append(
            f"Parse error: expected {len(result.headers)} fields, saw {len(fields)}"
        )

    logger.info(
        "csv_parsed",
        column_count=len(result.headers),
        row_count=len(result.records),
        error_count=len(result.errors),
    )

    return result


def _check_quoting(text: str) -> None:
    """
    Reject text whose quoting the tokenizer cannot follow.

    pandas' python engine tokenizes in strict mode and, with a callable
    on_bad_lines, drops a line that fails there without reporting it. An
    unterminated quote swallows every line after it, so check first.

    Raises:
        CSVParseError: On an unterminated quote or text after a closing quote
    """
    reader = csv.reader(StringIO(text), skipinitialspace=True, strict=True)
    try:
        for _ in reader:
            pass
    except csv.Error as e:
        logger.warning("csv_quoting_invalid", line=reader.line_num, error=str(e))
        raise CSVParseError(
            message=f"Malformed quoting near line {reader.line_num}",
            details={"line": reader.line_num, "original_error": str(e)}
        )


def _clean_cell(value) -> str:
    """Coerce a parsed cell to a trimmed string."""
    if value is None:
        return ""
    return str(value).strip()
