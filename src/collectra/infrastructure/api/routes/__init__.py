"""API Routes for Collectra."""

from collectra.infrastructure.api.routes.collection_sessions_router import (
    router as collection_sessions_router,
)

__all__ = [
    "collection_sessions_router",
]
