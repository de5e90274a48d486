"""Transport abstractions."""
from __future__ import annotations

from abc import ABC, abstractmethod
import os
from typing import Any, Mapping, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    import requests


class HTTPResponse(Protocol):
    """What the executor reads from a transport response."""

    status_code: int
    headers: Mapping[str, str]
    text: str


class Transport(ABC):
    """Abstract transport interface."""

    @abstractmethod
    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        data: str,
        timeout: float,
    ) -> HTTPResponse:  # noqa: D401
        """Send a POST request with an already serialized body."""
        raise NotImplementedError


class RequestsTransport(Transport):
    """Transport using the requests library.

    Only connection and read failures are retried here. Status codes,
    including 429, are returned untouched so the executor can classify them.

    Args:
        retries: Retry attempts for connection/read failures. Defaults to the
            ``SHOPIFY_GQL_RETRIES`` env var or ``3``.
        backoff: Exponential backoff factor between retries. Defaults to the
            ``SHOPIFY_GQL_BACKOFF`` env var or ``0.5`` seconds.
        jitter: Random jitter added to retry backoff. Defaults to the
            ``SHOPIFY_GQL_JITTER`` env var or ``0.1`` seconds.
        force_close: If True, send ``Connection: close`` with each request to
            disable keep-alives. Set to False to allow persistent connections.
    """

    def __init__(
        self,
        *,
        retries: int | None = None,
        backoff: float | None = None,
        jitter: float | None = None,
        force_close: bool = True,
    ) -> None:
        import requests
        from requests.adapters import HTTPAdapter
        from urllib3.util import Retry

        retry_total = retries if retries is not None else int(
            os.getenv("SHOPIFY_GQL_RETRIES", "3")
        )
        backoff_factor = backoff if backoff is not None else float(
            os.getenv("SHOPIFY_GQL_BACKOFF", "0.5")
        )
        backoff_jitter = jitter if jitter is not None else float(
            os.getenv("SHOPIFY_GQL_JITTER", "0.1")
        )
        retry = Retry(
            total=retry_total,
            connect=retry_total,
            read=retry_total,
            status=0,
            backoff_factor=backoff_factor,
            backoff_jitter=backoff_jitter,
            allowed_methods=["POST"],
            raise_on_status=False,
            respect_retry_after_header=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session = requests.Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        if force_close:
            session.headers.setdefault("Connection", "close")
        self._session = session

    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        data: str,
        timeout: float,
    ) -> "requests.Response":
        return self._session.post(
            url, headers=headers, data=data.encode("utf-8"), timeout=timeout
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
