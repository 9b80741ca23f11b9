"""Redirect URI resolution.

The callback URL handed to the authorization server is the absolute URL
of the route currently being served. The hosting framework is hidden
behind RequestContext, a protocol with a single method.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable
from urllib.parse import urlsplit

from oauth2_grants.logging_config import get_logger

if TYPE_CHECKING:
    from starlette.requests import Request

    from oauth2_grants.clients import ClientConfig

logger = get_logger(__name__)


@runtime_checkable
class RequestContext(Protocol):
    """The inbound request a grant flow runs within."""

    def current_url(self) -> str:
        """Absolute URL of the route being served, without query string."""
        ...


class StarletteRequestContext:
    """RequestContext backed by a Starlette request."""

    def __init__(self, request: Request) -> None:
        self._request = request

    def current_url(self) -> str:
        return str(self._request.url.replace(query="", fragment=""))


class StaticRequestContext:
    """RequestContext with a fixed URL, for CLI use and background jobs."""

    def __init__(self, url: str) -> None:
        """Initialize with an absolute URL.

        Raises:
            ValueError: If url is not absolute
        """
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            msg = f"Redirect URL must be absolute: {url!r}"
            raise ValueError(msg)
        self._url = parts._replace(query="", fragment="").geturl()

    def current_url(self) -> str:
        return self._url


class RedirectUriResolver:
    """Derives the redirect URI from the current request."""

    def __init__(self, request_context: RequestContext) -> None:
        self._request_context = request_context

    def get_redirect_uri(self, client: ClientConfig) -> str:  # noqa: ARG002
        """Return the redirect URI for a client.

        Every client gets the URL of the current route; the client is
        accepted so subclasses can route per client.
        """
        return self._request_context.current_url()
