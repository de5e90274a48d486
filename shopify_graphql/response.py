"""Response wrapper returned by the executor."""
from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from requests.structures import CaseInsensitiveDict

from .errors import GraphQLError


@dataclass(frozen=True)
class RateLimitInfo:
    currently_available: Optional[int] = None
    maximum_available: Optional[int] = None
    restore_rate: Optional[int] = None


@dataclass(frozen=True)
class GraphQLResponse:
    """A decoded GraphQL body plus the transport metadata it arrived with.

    GraphQL-level errors do not raise; check :attr:`successful` or call
    :meth:`raise_for_errors`.

    The body is deep-copied on construction, so later changes to the dict
    that was passed in do not show through. Only the top level is read-only:
    nested dicts and lists returned from :attr:`data` or :meth:`get` can
    still be mutated by the caller. Header lookups ignore case.

    Example:
        >>> resp = GraphQLResponse({"data": {"shop": {"name": "Acme"}}})
        >>> resp.get("shop.name")
        'Acme'
        >>> resp.get("shop.missing", "X")
        'X'
    """

    raw: Mapping[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)
    rate_limit: RateLimitInfo = field(default_factory=RateLimitInfo)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", MappingProxyType(copy.deepcopy(dict(self.raw))))
        object.__setattr__(self, "headers", MappingProxyType(CaseInsensitiveDict(self.headers)))

    @property
    def data(self) -> Optional[Any]:
        return self.raw.get("data")

    @property
    def errors(self) -> list[Any]:
        return list(self.raw.get("errors") or [])

    @property
    def extensions(self) -> dict[str, Any]:
        return dict(self.raw.get("extensions") or {})

    @property
    def has_errors(self) -> bool:
        return bool(self.raw.get("errors"))

    @property
    def successful(self) -> bool:
        return not self.has_errors

    @property
    def first_error(self) -> Optional[str]:
        errors = self.errors
        if not errors or not isinstance(errors[0], Mapping):
            return None
        return errors[0].get("message")

    def get(self, path: str, default: Any = None) -> Any:
        """Look up a dotted ``path`` inside ``data``.

        Every segment must name a key of a mapping; anything else, including
        indexing into a scalar, returns ``default``.
        """
        node = self.data
        if node is None:
            return default
        for segment in path.split("."):
            if not isinstance(node, Mapping) or segment not in node:
                return default
            node = node[segment]
        return node

    def raise_for_errors(self) -> "GraphQLResponse":
        if self.has_errors:
            raise GraphQLError(
                self.first_error or str(self.errors), graphql_errors=self.errors
            )
        return self

    def to_json(self) -> str:
        return json.dumps(dict(self.raw), indent=4)

    def __str__(self) -> str:
        return self.to_json()
