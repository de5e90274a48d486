"""Error classes for the Shopify GraphQL client."""
from __future__ import annotations

from typing import Any, Optional, Sequence


class ShopifyGQLError(Exception):
    """Base class for HTTP, protocol and GraphQL errors from Shopify."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        graphql_errors: Optional[Sequence[Any]] = None,
    ) -> None:
        snippet = message if len(message) <= 300 else message[:300]
        if status_code is not None:
            msg = f"HTTP {status_code}: {snippet}"
        else:
            msg = snippet
        super().__init__(msg)
        self.status_code = status_code
        self.graphql_errors = list(graphql_errors or [])

    @property
    def has_graphql_errors(self) -> bool:
        return bool(self.graphql_errors)


class InvalidConfigurationError(ShopifyGQLError, ValueError):
    """Raised at construction time for malformed client configuration."""


class AuthenticationError(ShopifyGQLError):
    """401/403: bad access token or missing scopes."""


class ShopLockedError(ShopifyGQLError):
    """423: the shop is locked."""


class RateLimitError(ShopifyGQLError):
    """429: Shopify asked us to slow down."""

    def __init__(self, message: str, retry_after: int = 0, status_code: Optional[int] = 429) -> None:
        super().__init__(message, status_code)
        self.retry_after = retry_after


class RetriesExceededError(RateLimitError):
    """Still rate limited after the retry budget was spent."""

    def __init__(self, message: str, retry_after: int = 0, attempts: int = 0) -> None:
        super().__init__(message, retry_after)
        self.attempts = attempts


class ServerError(ShopifyGQLError):
    """5xx or any status the client does not otherwise classify."""


class InvalidResponseError(ShopifyGQLError):
    """The body was not a JSON object."""


class EmptyResponseError(ShopifyGQLError):
    """HTTP 200 with an empty body."""


class TransportError(ShopifyGQLError):
    """The transport raised before a response was received."""


class GraphQLError(ShopifyGQLError):
    """A response carried a non-empty ``errors`` array."""
