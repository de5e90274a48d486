"""Public API exports."""
__version__ = "0.1.0"

from .errors import (
    AuthenticationError,
    EmptyResponseError,
    GraphQLError,
    InvalidConfigurationError,
    InvalidResponseError,
    RateLimitError,
    RetriesExceededError,
    ServerError,
    ShopifyGQLError,
    ShopLockedError,
    TransportError,
)
from .session import RateLimitHeaders, ShopifySession
from .query import QueryBuilder
from .response import GraphQLResponse, RateLimitInfo
from .client import ShopifyClient, execute
from .paginate import cursor_pages

__all__ = [
    "AuthenticationError",
    "EmptyResponseError",
    "GraphQLError",
    "GraphQLResponse",
    "InvalidConfigurationError",
    "InvalidResponseError",
    "QueryBuilder",
    "RateLimitError",
    "RateLimitHeaders",
    "RateLimitInfo",
    "RetriesExceededError",
    "ServerError",
    "ShopifyClient",
    "ShopifyGQLError",
    "ShopLockedError",
    "ShopifySession",
    "TransportError",
    "cursor_pages",
    "execute",
]
