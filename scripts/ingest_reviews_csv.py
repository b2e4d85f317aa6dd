"""
Ingest a review CSV from the command line.

Prints the detected columns and variations, then confirms the mapping and
prints an ingestion summary. Mapping flags replace the detected column for
their field; without flags the detected mapping is confirmed as-is.

Usage:
    python scripts/ingest_reviews_csv.py reviews.csv
    python scripts/ingest_reviews_csv.py reviews.csv \
        --review-text "Review Text" --rating "Star Rating" --date "Date Posted" \
        --variation-name Variant --overrides '{"Red-XL": {"name": "Scarlet / XL"}}'
"""
import sys
import os
import argparse
import json

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import ValidationError as PydanticValidationError

from exceptions import AppError
from models.review_csv import ConfirmMappingRequest
from parsers.csv_reader import decode_csv_content
from services.review_ingestion_service import get_review_ingestion_service


def show_analysis(text: str):
    """Print detected columns, variations and the preview."""
    upload = get_review_ingestion_service().analyze(text)
    columns = upload.detected_columns

    print(f"\n{'='*60}")
    print("DETECTED COLUMNS")
    print(f"{'='*60}")
    print(f"  review_text:    {columns.review_text}")
    print(f"  rating:         {columns.rating}")
    print(f"  date:           {columns.date}")
    print(f"  variation_id:   {columns.variation_id}")
    print(f"  variation_name: {columns.variation_name}")
    print(f"  unmapped:       {', '.join(columns.unmapped_columns) or '-'}")
    print(f"\nTotal rows: {upload.total_rows}")

    if upload.errors:
        print(f"\nStructural problems ({len(upload.errors)}):")
        for e in upload.errors:
            print(f"  - {e}")

    if upload.detected_variations:
        print(f"\nVariations ({len(upload.detected_variations)}):")
        for v in upload.detected_variations[:20]:
            print(f"  {v.name} [{v.type}]: {v.review_count} reviews")

    print("\nPreview:")
    for row in upload.preview:
        print(f"  {row}")

    return upload


def ingest(text: str, request: ConfirmMappingRequest):
    """Confirm the mapping and print the ingestion summary."""
    normalized = get_review_ingestion_service().process(text, request)
    result = normalized.result

    print(f"\n{'='*60}")
    print("INGESTION RESULTS")
    print(f"{'='*60}")
    print(f"  Total rows: {result.total_rows}")
    print(f"  Valid rows: {result.valid_rows}")
    print(f"  Errors:     {len(result.errors)}")

    if result.errors:
        print(f"\nRow errors ({len(result.errors)}):")
        for e in result.errors[:10]:
            print(f"  - Row {e.row}: {e.reason}")
        if len(result.errors) > 10:
            print(f"  ... and {len(result.errors) - 10} more")

    if result.variations:
        print("\nBy variation:")
        for name, stats in result.variations.items():
            print(f"  {name}: {stats.count}")

    return result


def main():
    parser = argparse.ArgumentParser(description="Ingest a review CSV")
    parser.add_argument("file", help="Path to the CSV file")
    parser.add_argument("--review-text", help="Header holding the review text")
    parser.add_argument("--rating", help="Header holding the rating")
    parser.add_argument("--date", help="Header holding the review date")
    parser.add_argument("--variation-id", help="Header holding a variation code")
    parser.add_argument("--variation-name", help="Header holding a variation name")
    parser.add_argument(
        "--overrides",
        help='JSON object of variation renames, e.g. {"Red-XL": {"name": "Scarlet / XL"}}'
    )
    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"File not found: {args.file}")
        return 1

    with open(args.file, "rb") as f:
        content = f.read()

    try:
        text = decode_csv_content(content)
        detected = show_analysis(text).detected_columns

        # Flags override the detected mapping field by field
        review_text = args.review_text or detected.review_text
        rating = args.rating or detected.rating
        date = args.date or detected.date
        if not (review_text and rating and date):
            print("\nCould not detect every required column.")
            print("Pass --review-text, --rating and --date to ingest.")
            return 1

        request = ConfirmMappingRequest(
            review_text=review_text,
            rating=rating,
            date=date,
            variation_id=args.variation_id or detected.variation_id,
            variation_name=args.variation_name or detected.variation_name,
            variations=json.loads(args.overrides) if args.overrides else {},
        )
        ingest(text, request)
    except json.JSONDecodeError as e:
        print(f"Invalid --overrides JSON: {e}")
        return 1
    except PydanticValidationError as e:
        print(f"Invalid mapping: {e}")
        return 1
    except AppError as e:
        print(f"{e.code}: {e.message}")
        for key, value in e.details.items():
            print(f"  {key}: {value}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
