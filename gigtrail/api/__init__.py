"""gigtrail API layer: routes, schemas, and middleware."""

from gigtrail.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from gigtrail.api.routes import router
from gigtrail.api.schemas import (
    CacheStatsResponse,
    ErrorResponse,
    HealthResponse,
    RootResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "CacheStatsResponse",
    "ErrorResponse",
    "HealthResponse",
    "RootResponse",
]
