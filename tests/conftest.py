"""
Shared test fixtures.

CSV fixtures are plain text; tests that need bytes encode them.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest

from models.review_csv import ConfirmedMapping


# ===================
# SAMPLE CSV CONTENT
# ===================

@pytest.fixture
def reviews_csv_text() -> str:
    """Three well-formed reviews with a readable variation column."""
    return (
        "Review Text,Star Rating,Date Posted,Variant,Reviewer\n"
        "Great product really loved it,5,2024-01-15,Red-XL,alice\n"
        "Fell apart after a week,2,2024-02-01,Blue-M,bob\n"
        "Fits well and looks nice,4,2024-03-10,Red-XL,carol\n"
    )


@pytest.fixture
def messy_reviews_csv_text() -> str:
    """Mix of valid and invalid rows (short text, bad rating, bad date)."""
    return (
        "review,rating,date,sku\n"
        "Absolutely wonderful,4.5,2024-05-01,B07XJ8C8F5\n"
        "Meh,3,2024-05-02,B07XJ8C8F5\n"
        "Would not buy again,abc,2024-05-03,B08ABCDE12\n"
        "Arrived broken sadly,1,not a date,B08ABCDE12\n"
        "Way better than expected,9,2024-05-05,B08ABCDE12\n"
    )


@pytest.fixture
def confirmed_mapping() -> ConfirmedMapping:
    """Mapping matching reviews_csv_text."""
    return ConfirmedMapping(
        review_text="Review Text",
        rating="Star Rating",
        date="Date Posted",
        variation_name="Variant",
    )


@pytest.fixture
def sample_records() -> list:
    """Raw records as produced by the CSV reader for reviews_csv_text."""
    return [
        {
            "Review Text": "Great product really loved it",
            "Star Rating": "5",
            "Date Posted": "2024-01-15",
            "Variant": "Red-XL",
            "Reviewer": "alice",
        },
        {
            "Review Text": "Fell apart after a week",
            "Star Rating": "2",
            "Date Posted": "2024-02-01",
            "Variant": "Blue-M",
            "Reviewer": "bob",
        },
        {
            "Review Text": "Fits well and looks nice",
            "Star Rating": "4",
            "Date Posted": "2024-03-10",
            "Variant": "Red-XL",
            "Reviewer": "carol",
        },
    ]


# ===================
# PREVIEW CACHE
# ===================

@pytest.fixture(autouse=True)
def clear_preview_cache():
    """Start and end every test with an empty preview cache."""
    from services import preview_cache_service
    preview_cache_service.clear_previews()
    yield
    preview_cache_service.clear_previews()


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
