"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.imports import router as imports_router
from routes.suggestions import router as suggestions_router

__all__ = [
    "imports_router",
    "suggestions_router",
]
