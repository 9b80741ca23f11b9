"""Tests for redirect URI resolution."""

from __future__ import annotations

import pytest
from starlette.requests import Request

from oauth2_grants.clients import ClientRegistry
from oauth2_grants.redirect import (
    RedirectUriResolver,
    RequestContext,
    StarletteRequestContext,
    StaticRequestContext,
)


def make_request(path: str = "/oauth2/callback", query: bytes = b"code=abc&state=xyz") -> Request:
    """Build a Starlette request for testing."""
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "https",
            "server": ("app.example.com", 443),
            "path": path,
            "query_string": query,
            "headers": [(b"host", b"app.example.com")],
        }
    )


class TestStarletteRequestContext:
    """Tests for StarletteRequestContext."""

    def test_absolute_url_without_query(self) -> None:
        """Test that the current URL is absolute and drops the query."""
        context = StarletteRequestContext(make_request())

        assert context.current_url() == "https://app.example.com/oauth2/callback"

    def test_satisfies_protocol(self) -> None:
        assert isinstance(StarletteRequestContext(make_request()), RequestContext)


class TestStaticRequestContext:
    """Tests for StaticRequestContext."""

    def test_strips_query(self) -> None:
        """Test that query and fragment are removed."""
        context = StaticRequestContext("http://localhost:8000/cb?x=1#frag")

        assert context.current_url() == "http://localhost:8000/cb"

    def test_rejects_relative(self) -> None:
        """Test that relative URLs are refused."""
        with pytest.raises(ValueError, match="absolute"):
            StaticRequestContext("/oauth2/callback")


class TestRedirectUriResolver:
    """Tests for RedirectUriResolver."""

    def test_invariant_across_clients(self, registry: ClientRegistry) -> None:
        """Test that every client gets the current route."""
        resolver = RedirectUriResolver(StarletteRequestContext(make_request()))

        uris = [resolver.get_redirect_uri(client) for client in registry]

        assert set(uris) == {"https://app.example.com/oauth2/callback"}
