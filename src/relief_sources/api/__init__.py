from relief_sources.api.app import CORS_HEADERS, create_app
from relief_sources.api.schemas import SearchRequest

__all__ = ["CORS_HEADERS", "SearchRequest", "create_app"]
