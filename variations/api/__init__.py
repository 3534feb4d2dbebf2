"""API layer module.

Contains FastAPI routers, middleware and request/response schemas.
"""

from variations.api.health import router as health_router
from variations.api.variations import router as variations_router

__all__ = [
    "health_router",
    "variations_router",
]
