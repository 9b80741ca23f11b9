"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from oauth2_grants.clients import ClientConfig, ClientRegistry, GrantType
from oauth2_grants.config import Settings
from oauth2_grants.oauth.token_store import InMemoryStateStore
from oauth2_grants.redirect import StaticRequestContext

AUTH_URL = "https://auth.example.com/authorize"
TOKEN_URL = "https://auth.example.com/token"
RESOURCE_URL = "https://auth.example.com/me"
CALLBACK_URL = "https://app.example.com/oauth2/callback"


@pytest.fixture
def default_settings() -> Settings:
    """Create default settings for testing."""
    return Settings()


@pytest.fixture
def svc_client() -> ClientConfig:
    """A client credentials client."""
    return ClientConfig(
        id="svc1",
        client_id="svc1",
        client_secret="s",
        grant_type=GrantType.CLIENT_CREDENTIALS,
        authorization_uri="https://auth/a",
        token_uri=TOKEN_URL,
        scopes=["read", "write"],
        scope_separator=" ",
    )


@pytest.fixture
def web_client() -> ClientConfig:
    """An authorization code client."""
    return ClientConfig(
        id="web",
        name="Web App",
        client_id="web-client-id",
        client_secret="web-secret",
        grant_type=GrantType.AUTHORIZATION_CODE,
        authorization_uri=AUTH_URL,
        token_uri=TOKEN_URL,
        resource_uri=RESOURCE_URL,
        scopes=["openid", "profile"],
        scope_separator=" ",
    )


@pytest.fixture
def password_client() -> ClientConfig:
    """A resource owner password credentials client."""
    return ClientConfig(
        id="legacy",
        client_id="legacy-client",
        client_secret="legacy-secret",
        grant_type=GrantType.PASSWORD,
        authorization_uri=AUTH_URL,
        token_uri=TOKEN_URL,
    )


@pytest.fixture
def registry(
    svc_client: ClientConfig,
    web_client: ClientConfig,
    password_client: ClientConfig,
) -> ClientRegistry:
    """Registry holding all test clients."""
    return ClientRegistry([svc_client, web_client, password_client])


@pytest.fixture
def store() -> InMemoryStateStore:
    """Create an in-memory state store."""
    return InMemoryStateStore()


@pytest.fixture
def request_context() -> StaticRequestContext:
    """Request context pointing at the callback route."""
    return StaticRequestContext(CALLBACK_URL)
