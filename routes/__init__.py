"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.reviews_csv import router as reviews_csv_router

__all__ = [
    "reviews_csv_router",
]
