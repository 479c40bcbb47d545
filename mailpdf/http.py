"""HTTP fetching for remote images and avatars.

A thin wrapper around a requests Session. Fetch failures are muted by
default: a network error comes back as a response with status code 0
instead of an exception, so callers can treat it like any other non-200.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from mailpdf.errors import FetchFailure

logger = logging.getLogger(__name__)

# Seconds to wait for a remote resource before giving up
DEFAULT_TIMEOUT = 30

USER_AGENT = "mailpdf (+https://github.com/user/mailpdf)"


@dataclass(frozen=True)
class FetchResponse:
    """Result of fetching a URL.

    Attributes:
        status_code: HTTP status, or 0 if the request never completed.
        content: Response body bytes (empty on failure).
        content_type: Media type without parameters, lowercased.
    """

    status_code: int
    content: bytes = b""
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class Fetcher(Protocol):
    """Anything that can fetch a URL. HttpFetcher is the default."""

    def fetch(self, url: str, mute_http_exceptions: bool = True) -> FetchResponse:
        ...


class HttpFetcher:
    """Fetch remote resources over HTTP(S).

    Example:
        fetcher = HttpFetcher()
        response = fetcher.fetch("https://example.com/logo.png")
        if response.ok:
            ...
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the fetcher.

        Args:
            session: Session to reuse. A new one is created if omitted.
            timeout: Per-request timeout in seconds.
        """
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._timeout = timeout

    def fetch(self, url: str, mute_http_exceptions: bool = True) -> FetchResponse:
        """Download a URL.

        Args:
            url: Absolute http(s) URL.
            mute_http_exceptions: If True, network errors and non-200
                statuses are returned as a FetchResponse instead of raised.

        Returns:
            FetchResponse with status, body and content type.

        Raises:
            FetchFailure: Only when mute_http_exceptions is False and the
                request failed or returned a non-200 status.
        """
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            if not mute_http_exceptions:
                raise FetchFailure(url, str(e)) from e
            logger.debug("Fetch of %s failed: %s", url, e)
            return FetchResponse(status_code=0)

        if response.status_code != 200 and not mute_http_exceptions:
            raise FetchFailure(url, f"HTTP {response.status_code}")

        content_type = response.headers.get("Content-Type", "")
        return FetchResponse(
            status_code=response.status_code,
            content=response.content,
            content_type=content_type.split(";")[0].strip().lower(),
        )
