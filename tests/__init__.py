"""
Tests for the review CSV ingestion service.

Run all tests: pytest
Run one module: pytest tests/unit/test_review_normalizer.py -v
"""
