"""Session object for Shopify GraphQL API."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import InvalidConfigurationError
from .transport import RequestsTransport, Transport

SHOP_DOMAIN_SUFFIX = ".myshopify.com"
DEFAULT_API_VERSION = "2025-07"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_shop_domain(shop: str) -> str:
    """Return the bare ``<shop>.myshopify.com`` host for ``shop``.

    Accepts ``acme``, ``acme.myshopify.com`` or ``https://acme.myshopify.com/``.
    Any other dotted host (a custom domain, a typo) is rejected.
    """
    domain = _SCHEME_RE.sub("", shop.strip()).rstrip("/").lower()
    if not domain:
        raise InvalidConfigurationError("Shop domain must not be empty")
    if domain.endswith(SHOP_DOMAIN_SUFFIX):
        return domain
    if "." in domain:
        raise InvalidConfigurationError(f"Invalid shop domain format: {shop!r}")
    return domain + SHOP_DOMAIN_SUFFIX


@dataclass(frozen=True)
class RateLimitHeaders:
    """Response header names the rate-limit counters are read from.

    A name of ``None`` means the counter is only taken from the body's
    ``extensions.cost.throttleStatus``. All three default to ``None``.
    """

    currently_available: Optional[str] = None
    maximum_available: Optional[str] = None
    restore_rate: Optional[str] = None


@dataclass(frozen=True)
class ShopifySession:
    """Immutable configuration for talking to one shop's Admin GraphQL API.

    Everything is fixed at construction, so one session can be shared by
    threads issuing independent requests as long as the transport allows it.

    Attributes:
        shop: Shop handle or domain; normalized to ``<handle>.myshopify.com``
        access_token: The Admin API access token
        api_version: The Shopify API version to use (default: '2025-07')
        timeout: Per-attempt transport timeout in seconds (default: 30)
        max_retries: Retries after a 429 before giving up (default: 3)
        headers: Extra default headers sent with every request
        rate_limit_headers: Where to find the rate-limit counters
        transport: Transport implementation (defaults to RequestsTransport)
    """

    shop: str
    access_token: str = field(repr=False)
    api_version: str = DEFAULT_API_VERSION
    timeout: float = 30
    max_retries: int = 3
    headers: Mapping[str, str] = field(default_factory=dict)
    rate_limit_headers: RateLimitHeaders = field(default_factory=RateLimitHeaders)
    transport: Transport = field(default_factory=RequestsTransport, repr=False)
    graphql_url: str = field(init=False)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise InvalidConfigurationError("max_retries must not be negative")
        if self.timeout <= 0:
            raise InvalidConfigurationError("timeout must be positive")
        domain = normalize_shop_domain(self.shop)
        object.__setattr__(self, "shop", domain)
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(
            self,
            "graphql_url",
            f"https://{domain}/admin/api/{self.api_version}/graphql.json",
        )

    @classmethod
    def from_env(cls, **overrides) -> "ShopifySession":
        """Build a session from ``SHOPIFY_*`` environment variables.

        Keyword arguments take precedence over the environment.
        """
        shop = overrides.pop("shop", None) or os.getenv("SHOPIFY_SHOP")
        token = overrides.pop("access_token", None) or os.getenv("SHOPIFY_ACCESS_TOKEN")
        if not shop:
            raise InvalidConfigurationError("SHOPIFY_SHOP is not set")
        if not token:
            raise InvalidConfigurationError("SHOPIFY_ACCESS_TOKEN is not set")
        try:
            overrides.setdefault(
                "api_version", os.getenv("SHOPIFY_API_VERSION", DEFAULT_API_VERSION)
            )
            overrides.setdefault("timeout", float(os.getenv("SHOPIFY_GQL_TIMEOUT", "30")))
            overrides.setdefault(
                "max_retries", int(os.getenv("SHOPIFY_GQL_MAX_RETRIES", "3"))
            )
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from exc
        return cls(shop, token, **overrides)
