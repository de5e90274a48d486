"""Client helpers."""
from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from requests.structures import CaseInsensitiveDict

from . import __version__
from .errors import (
    AuthenticationError,
    EmptyResponseError,
    InvalidResponseError,
    RetriesExceededError,
    ServerError,
    ShopifyGQLError,
    ShopLockedError,
    TransportError,
)
from .query import QueryBuilder
from .response import GraphQLResponse, RateLimitInfo
from .session import RateLimitHeaders, ShopifySession
from .transport import HTTPResponse, RequestsTransport, Transport

logger = logging.getLogger(__name__)

USER_AGENT = f"shopify-graphql-python/{__version__}"
MAX_BACKOFF = 60

_COUNTER_RE = re.compile(r"(\d+)(?:/(\d+))?")

Operation = Union[str, QueryBuilder]


@dataclass(frozen=True)
class Succeeded:
    response: GraphQLResponse


@dataclass(frozen=True)
class RateLimited:
    retry_after: int


@dataclass(frozen=True)
class Failed:
    error: ShopifyGQLError


Outcome = Union[Succeeded, RateLimited, Failed]


def backoff_delay(attempt: int, retry_after: int = 0) -> int:
    """Seconds to wait before retry number ``attempt + 1``.

    A ``Retry-After`` between 1 and 60 seconds wins; otherwise the delay is
    ``2 ** attempt`` capped at 60.
    """
    if 0 < retry_after <= MAX_BACKOFF:
        return retry_after
    return min(2 ** attempt, MAX_BACKOFF)


def parse_counter(value: Optional[str]) -> Optional[int]:
    """Leading integer of a header such as ``"40"`` or ``"32/40"``."""
    if not value:
        return None
    match = _COUNTER_RE.search(value)
    return int(match.group(1)) if match else None


def _parse_retry_after(value: Optional[str]) -> int:
    try:
        return int(str(value).strip()) if value is not None else 0
    except ValueError:
        return 0


def _throttle_counter(body: Mapping[str, Any], key: str) -> Optional[int]:
    extensions = body.get("extensions")
    if not isinstance(extensions, Mapping):
        return None
    cost = extensions.get("cost")
    if not isinstance(cost, Mapping):
        return None
    status = cost.get("throttleStatus")
    if not isinstance(status, Mapping):
        return None
    value = status.get(key)
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def extract_rate_limit(
    headers: Mapping[str, str],
    body: Mapping[str, Any],
    names: RateLimitHeaders,
) -> RateLimitInfo:
    """Best-effort rate-limit counters; unknown values are ``None``."""
    counters = {}
    for attr, throttle_key in (
        ("currently_available", "currentlyAvailable"),
        ("maximum_available", "maximumAvailable"),
        ("restore_rate", "restoreRate"),
    ):
        header = getattr(names, attr)
        value = parse_counter(headers.get(header)) if header else None
        if value is None:
            value = _throttle_counter(body, throttle_key)
        counters[attr] = value
    return RateLimitInfo(**counters)


def build_headers(
    session: ShopifySession, extra: Optional[Mapping[str, str]] = None
) -> dict[str, str]:
    """Default headers, then the session's extras, then per-call ``extra``."""
    headers: CaseInsensitiveDict = CaseInsensitiveDict(
        {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": session.access_token,
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
    )
    headers.update(session.headers)
    if extra:
        headers.update(extra)
    return dict(headers)


def classify(resp: HTTPResponse, session: ShopifySession) -> Outcome:
    """Map one HTTP response onto an attempt outcome."""
    status = getattr(resp, "status_code", None)
    if status is None:
        return Failed(ShopifyGQLError("Transport response missing status_code"))
    headers = CaseInsensitiveDict(getattr(resp, "headers", None) or {})
    text = getattr(resp, "text", "") or ""

    if status in (401, 403):
        reason = "Invalid access token" if status == 401 else "Access forbidden - check your permissions"
        return Failed(AuthenticationError(reason, status))
    if status == 423:
        return Failed(ShopLockedError("Shop is locked", status))
    if status == 429:
        return RateLimited(_parse_retry_after(headers.get("Retry-After")))
    if status != 200:
        snippet = text[:300] or "Shopify server error"
        return Failed(ServerError(snippet, status))

    if not text.strip():
        return Failed(EmptyResponseError("Empty response from Shopify API", status))
    try:
        body = json.loads(text)
    except ValueError as exc:
        return Failed(InvalidResponseError(f"Invalid JSON response: {exc}", status))
    if not isinstance(body, dict):
        return Failed(
            InvalidResponseError("Expected a JSON object, got " + type(body).__name__, status)
        )

    rate_limit = extract_rate_limit(headers, body, session.rate_limit_headers)
    return Succeeded(GraphQLResponse(body, headers, rate_limit))


def execute(
    session: ShopifySession,
    operation: Operation,
    variables: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> GraphQLResponse:
    """Execute a GraphQL operation against the Shopify Admin API.

    Only 429 responses are retried, up to ``session.max_retries`` times. Each
    retry blocks the calling thread for the ``Retry-After`` delay when Shopify
    sends a usable one, otherwise for ``2 ** attempt`` seconds capped at 60.

    Args:
        session: A ShopifySession instance
        operation: The GraphQL document, or a QueryBuilder to build it from
        variables: Optional mapping of variables; omitted from the payload when empty
        headers: Extra headers for this call only, overriding the defaults

    Returns:
        GraphQLResponse: The decoded response. GraphQL errors do not raise;
        check ``response.successful``.

    Raises:
        AuthenticationError: On 401/403.
        ShopLockedError: On 423.
        RetriesExceededError: When still rate limited after the retry budget.
        ServerError: On 5xx or any other unexpected status.
        EmptyResponseError: On a 200 with an empty body.
        InvalidResponseError: When the body is not a JSON object.
        TransportError: When the transport itself raises.

    Example:
        >>> session = ShopifySession("acme", access_token)
        >>> resp = execute(session, "{ shop { name } }")
        >>> resp.get("shop.name")
    """

    query = operation.build() if isinstance(operation, QueryBuilder) else operation
    payload: dict[str, Any] = {"query": query}
    if variables:
        payload["variables"] = dict(variables)
    body = json.dumps(payload)
    request_headers = build_headers(session, headers)

    attempt = 0
    while attempt <= session.max_retries:
        logger.debug(
            "POST %s (attempt %d/%d)",
            session.graphql_url,
            attempt + 1,
            session.max_retries + 1,
        )
        try:
            resp = session.transport.post(
                session.graphql_url,
                headers=request_headers,
                data=body,
                timeout=session.timeout,
            )
        except ShopifyGQLError:
            raise
        except Exception as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

        outcome = classify(resp, session)
        if isinstance(outcome, Succeeded):
            return outcome.response
        if isinstance(outcome, Failed):
            raise outcome.error

        if attempt >= session.max_retries:
            logger.error(
                "Rate limited by %s after %d attempts, giving up",
                session.shop,
                attempt + 1,
            )
            raise RetriesExceededError(
                "Rate limit exceeded", outcome.retry_after, attempts=attempt + 1
            )
        delay = backoff_delay(attempt, outcome.retry_after)
        logger.warning(
            "Rate limited by %s, retrying in %ds (attempt %d/%d)",
            session.shop,
            delay,
            attempt + 1,
            session.max_retries + 1,
        )
        time.sleep(delay)
        attempt += 1
    # If loop exits without return, raise generic error
    raise ShopifyGQLError("Max retries exceeded")


SHOP_INFO_QUERY = (
    QueryBuilder.query("ShopInfo")
    .field(
        "shop",
        lambda shop: shop.fields(
            ["id", "name", "myshopifyDomain", "currencyCode", "timezoneAbbreviation"]
        ).field("primaryDomain", ["host"]),
    )
    .build()
)


class ShopifyClient:
    """Convenience wrapper around :func:`execute` bound to one session."""

    def __init__(self, session: ShopifySession) -> None:
        self.session = session

    @classmethod
    def create(
        cls,
        shop: str,
        access_token: str,
        transport: Optional[Transport] = None,
        **options: Any,
    ) -> "ShopifyClient":
        """Build a client, defaulting to a :class:`RequestsTransport`.

        ``options`` are passed to :class:`ShopifySession` (``timeout``,
        ``max_retries``, ``headers``, ``api_version``, ``rate_limit_headers``).
        """
        session = ShopifySession(
            shop, access_token, transport=transport or RequestsTransport(), **options
        )
        return cls(session)

    def execute(
        self,
        operation: Operation,
        variables: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> GraphQLResponse:
        """Execute a query or mutation with this client's session.

        Args:
            operation: The GraphQL document, or a QueryBuilder to build it from
            variables: Optional mapping of variables
            headers: Extra headers for this call only

        Returns:
            GraphQLResponse: The decoded response.

        Raises:
            ShopifyGQLError: See :func:`execute` for the subclasses raised.
        """
        return execute(self.session, operation, variables, headers)

    def query(
        self,
        query: Operation,
        variables: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> GraphQLResponse:
        """Run a query. Same arguments and errors as :meth:`execute`."""
        return self.execute(query, variables, headers)

    def mutate(
        self,
        mutation: Operation,
        variables: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> GraphQLResponse:
        """Run a mutation. Same arguments and errors as :meth:`execute`.

        Mutation ``userErrors`` come back in the response data and never
        raise.
        """
        return self.execute(mutation, variables, headers)

    def shop_info(self) -> GraphQLResponse:
        """Fetch the shop's id, name, domains, currency and timezone.

        Example:
            >>> client.shop_info().get("shop.myshopifyDomain")
            'acme.myshopify.com'
        """
        return self.query(SHOP_INFO_QUERY)
