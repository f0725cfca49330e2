"""API layer module.

Contains FastAPI routers, middleware and request/response schemas.
"""

from catalogadmin.api.categories import router as categories_router
from catalogadmin.api.health import router as health_router
from catalogadmin.api.imports import router as imports_router
from catalogadmin.api.preferences import router as preferences_router
from catalogadmin.api.products import router as products_router

__all__ = [
    "categories_router",
    "health_router",
    "imports_router",
    "preferences_router",
    "products_router",
]
