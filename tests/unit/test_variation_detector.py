"""
Unit tests for product variation detection.

Run: pytest tests/unit/test_variation_detector.py -v
"""

from parsers.variation_detector import (
    classify_variation_type,
    extract_attributes,
    detect_variations,
)
from models.review_csv import ColumnMapping


# ===================
# TYPE CLASSIFICATION TESTS
# ===================

class TestClassifyVariationType:
    """Tests for semantic vs. code classification."""

    def test_readable_words_are_semantic(self):
        assert classify_variation_type("Red-XL") == "semantic"
        assert classify_variation_type("Large Blue") == "semantic"

    def test_codes_are_non_semantic(self):
        assert classify_variation_type("B07XJ8C8F5") == "non-semantic"

    def test_words_and_numbers_are_mixed(self):
        assert classify_variation_type("Model 3 Pro") == "mixed"


# ===================
# ATTRIBUTE EXTRACTION TESTS
# ===================

class TestExtractAttributes:
    """Tests for extract_attributes."""

    def test_color_material_and_measurement(self):
        """A measurement overrides the bare size word."""
        assert extract_attributes("Navy Cotton 12 inch") == {
            "color": "navy",
            "size": "12 inch",
            "material": "cotton",
        }

    def test_model_name(self):
        """The word after 'model' is the model."""
        assert extract_attributes("Model X")["model"] == "X"

    def test_code_has_no_attributes(self):
        assert extract_attributes("B07XJ8C8F5") == {}


# ===================
# DETECTION TESTS
# ===================

class TestDetectVariations:
    """Tests for detect_variations."""

    def test_counts_and_sorts(self, sample_records):
        """Variations are sorted by review count, most first."""
        mapping = ColumnMapping(review_text="Review Text", variation_name="Variant")
        variations = detect_variations(sample_records, mapping)

        assert [v.name for v in variations] == ["Red-XL", "Blue-M"]
        assert [v.review_count for v in variations] == [2, 1]
        assert variations[0].id is None
        assert variations[0].type == "semantic"
        assert variations[0].attributes == {"color": "red", "size": "xl"}

    def test_id_column_is_key(self):
        """With an id column, id is the key and the name is the label."""
        records = [
            {"sku": "A1", "color": "Red"},
            {"sku": "A1", "color": "Red"},
            {"sku": "B2", "color": "Blue"},
        ]
        mapping = ColumnMapping(variation_id="sku", variation_name="color")
        variations = detect_variations(records, mapping)

        assert variations[0].id == "A1"
        assert variations[0].name == "Red"
        assert variations[0].review_count == 2

    def test_code_only_variations(self):
        """Without a name column the id is also the label."""
        records = [{"asin": "B07XJ8C8F5"}]
        mapping = ColumnMapping(variation_id="asin")
        variations = detect_variations(records, mapping)

        assert variations[0].id == "B07XJ8C8F5"
        assert variations[0].name == "B07XJ8C8F5"
        assert variations[0].type == "non-semantic"
        assert variations[0].attributes is None

    def test_blank_cells_skipped(self):
        """Rows without a variation value are not counted."""
        records = [{"color": ""}, {"color": "Red"}]
        variations = detect_variations(records, ColumnMapping(variation_name="color"))

        assert len(variations) == 1
        assert variations[0].review_count == 1

    def test_no_variation_columns(self, sample_records):
        """Nothing to detect without variation columns."""
        mapping = ColumnMapping(review_text="Review Text")

        assert detect_variations(sample_records, mapping) == []
