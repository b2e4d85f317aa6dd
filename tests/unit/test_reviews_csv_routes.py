"""
API tests for the review CSV ingestion routes.

Run: pytest tests/unit/test_reviews_csv_routes.py -v
"""

import json
import pytest

from config import settings

BASE = "/api/reviews/csv"


def csv_file(text: str, content_type: str = "text/csv", name: str = "reviews.csv"):
    """Helper to build a multipart file tuple."""
    return {"file": (name, text.encode("utf-8"), content_type)}


@pytest.fixture
def mapping_body():
    """Confirm payload for reviews_csv_text."""
    return {
        "review_text": "Review Text",
        "rating": "Star Rating",
        "date": "Date Posted",
        "variation_name": "Variant",
        "variations": {
            "Red-XL": {"name": "Scarlet / XL", "description": "limited run"},
        },
    }


# ===================
# APP ENDPOINTS
# ===================

class TestAppEndpoints:
    """Tests for /health and /."""

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root_lists_endpoints(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["analyze"] == f"{BASE}/analyze"


# ===================
# DETECT / PREFLIGHT
# ===================

class TestDetectColumns:
    """Tests for POST /detect-columns."""

    def test_detects_columns(self, test_client):
        response = test_client.post(
            f"{BASE}/detect-columns",
            json={"headers": ["Star Rating", "Review Text", "Date Posted", "Notes"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["review_text"] == "Review Text"
        assert data["rating"] == "Star Rating"
        assert data["date"] == "Date Posted"
        assert data["unmapped_columns"] == ["Notes"]


class TestPreflight:
    """Tests for POST /preflight."""

    def test_valid_file(self, test_client, reviews_csv_text):
        response = test_client.post(f"{BASE}/preflight", files=csv_file(reviews_csv_text))

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert len(data["preview"]) == 3

    def test_invalid_content_is_not_http_error(self, test_client):
        """Content problems come back as is_valid=false."""
        response = test_client.post(f"{BASE}/preflight", files=csv_file("id,qty\n1,2\n"))

        assert response.status_code == 200
        assert response.json()["is_valid"] is False
        assert len(response.json()["errors"]) == 1

    def test_rejects_unsupported_type(self, test_client, reviews_csv_text):
        response = test_client.post(
            f"{BASE}/preflight",
            files=csv_file(reviews_csv_text, content_type="image/png", name="x.png"),
        )

        assert response.status_code == 415
        assert response.json()["error"]["code"] == "UNSUPPORTED_FILE_TYPE"

    def test_rejects_large_file(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_mb", 1)
        text = "review,rating,date\n" + "x" * (1024 * 1024 + 1)

        response = test_client.post(f"{BASE}/preflight", files=csv_file(text))

        assert response.status_code == 413
        assert response.json()["error"]["code"] == "FILE_TOO_LARGE"


# ===================
# ANALYZE → CONFIRM
# ===================

class TestAnalyzeAndConfirm:
    """Tests for the two-stage flow."""

    def test_analyze(self, test_client, reviews_csv_text):
        response = test_client.post(f"{BASE}/analyze", files=csv_file(reviews_csv_text))

        assert response.status_code == 200
        data = response.json()
        assert data["preview_id"]
        assert data["is_valid"] is True
        assert data["needs_confirmation"] is True
        assert data["total_rows"] == 3
        assert data["detected_columns"]["variation_name"] == "Variant"
        assert data["detected_variations"][0]["name"] == "Red-XL"
        assert data["detected_variations"][0]["review_count"] == 2

    def test_analyze_empty_file(self, test_client):
        response = test_client.post(f"{BASE}/analyze", files=csv_file("review,rating,date\n"))

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "CSV_EMPTY"

    def test_analyze_non_utf8(self, test_client):
        files = {"file": ("reviews.csv", b"review\n\xff\xfe broken\n", "text/csv")}
        response = test_client.post(f"{BASE}/analyze", files=files)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "CSV_PARSE_ERROR"

    def test_analyze_unterminated_quote(self, test_client):
        text = "review,rating,date\nFine row here,4,2024-01-01\n\"Broken row,5,2024-01-02\n"
        response = test_client.post(f"{BASE}/analyze", files=csv_file(text))

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "CSV_PARSE_ERROR"

    def test_confirm(self, test_client, reviews_csv_text, mapping_body):
        preview_id = test_client.post(
            f"{BASE}/analyze", files=csv_file(reviews_csv_text)
        ).json()["preview_id"]

        response = test_client.post(f"{BASE}/confirm/{preview_id}", json=mapping_body)

        assert response.status_code == 200
        data = response.json()
        assert data["total_rows"] == 3
        assert data["valid_rows"] == 3
        assert data["errors"] == []
        assert data["reviews"][0]["product_variation"] == "Scarlet / XL"
        assert data["reviews"][0]["metadata"] == {
            "Reviewer": "alice",
            "originalVariationName": "Red-XL",
            "variationDescription": "limited run",
        }
        assert data["variations"]["Scarlet / XL"]["count"] == 2

    def test_confirm_consumes_preview(self, test_client, reviews_csv_text, mapping_body):
        """A preview can only be confirmed once."""
        preview_id = test_client.post(
            f"{BASE}/analyze", files=csv_file(reviews_csv_text)
        ).json()["preview_id"]

        test_client.post(f"{BASE}/confirm/{preview_id}", json=mapping_body)
        response = test_client.post(f"{BASE}/confirm/{preview_id}", json=mapping_body)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PREVIEW_NOT_FOUND"

    def test_confirm_unknown_preview(self, test_client, mapping_body):
        response = test_client.post(f"{BASE}/confirm/nope", json=mapping_body)

        assert response.status_code == 404

    def test_confirm_unknown_column_keeps_preview(self, test_client, reviews_csv_text, mapping_body):
        """A bad mapping can be corrected and resubmitted."""
        preview_id = test_client.post(
            f"{BASE}/analyze", files=csv_file(reviews_csv_text)
        ).json()["preview_id"]

        bad = dict(mapping_body, rating="Stars")
        response = test_client.post(f"{BASE}/confirm/{preview_id}", json=bad)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "MAPPING_COLUMN_NOT_FOUND"

        retry = test_client.post(f"{BASE}/confirm/{preview_id}", json=mapping_body)
        assert retry.status_code == 200

    def test_confirm_missing_required_field(self, test_client, reviews_csv_text):
        preview_id = test_client.post(
            f"{BASE}/analyze", files=csv_file(reviews_csv_text)
        ).json()["preview_id"]

        response = test_client.post(
            f"{BASE}/confirm/{preview_id}",
            json={"review_text": "Review Text", "rating": "Star Rating"},
        )

        assert response.status_code == 422

    def test_cancel_preview(self, test_client, reviews_csv_text):
        preview_id = test_client.post(
            f"{BASE}/analyze", files=csv_file(reviews_csv_text)
        ).json()["preview_id"]

        response = test_client.delete(f"{BASE}/preview/{preview_id}")
        assert response.status_code == 200
        assert response.json()["success"] is True

        again = test_client.delete(f"{BASE}/preview/{preview_id}")
        assert again.status_code == 404


# ===================
# ONE-SHOT PROCESS
# ===================

class TestProcess:
    """Tests for POST /process."""

    def test_process(self, test_client, messy_reviews_csv_text):
        mapping = {"review_text": "review", "rating": "rating", "date": "date", "variation_id": "sku"}

        response = test_client.post(
            f"{BASE}/process",
            files=csv_file(messy_reviews_csv_text),
            data={"mapping": json.dumps(mapping)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_rows"] == 5
        assert data["valid_rows"] == len(data["reviews"]) == 2
        assert [e["row"] for e in data["errors"]] == [3, 4, 5]

    def test_process_invalid_mapping_json(self, test_client, reviews_csv_text):
        response = test_client.post(
            f"{BASE}/process",
            files=csv_file(reviews_csv_text),
            data={"mapping": "{not json"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "MAPPING_INVALID"
