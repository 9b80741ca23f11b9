"""Tests for the collaborator factory registry."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from oauth2_grants.exceptions import CollaboratorError
from oauth2_grants.oauth.collaborators import (
    build_collaborators,
    close_collaborators,
    register_collaborator,
    registered_collaborators,
    resolve_collaborator,
    unregister_collaborator,
)
from oauth2_grants.oauth.grants import GrantFactory


class AuditingParser:
    """Stand-in token parser used by tests."""


@pytest.fixture
def auditing_parser() -> Iterator[str]:
    """Register a custom collaborator for the duration of a test."""
    register_collaborator("auditing_parser", AuditingParser)
    yield "auditing_parser"
    unregister_collaborator("auditing_parser")


class TestRegistry:
    """Tests for registering and resolving factories."""

    def test_builtin_names(self) -> None:
        """Test that built-in collaborators are registered."""
        assert {"httpx", "grant_factory", "token_parser"} <= set(registered_collaborators())
        assert resolve_collaborator("grant_factory") is GrantFactory

    def test_register_and_resolve(self, auditing_parser: str) -> None:
        """Test that registered factories resolve by name."""
        assert resolve_collaborator(auditing_parser) is AuditingParser

    def test_unknown_name(self) -> None:
        """Test that unknown names raise CollaboratorError."""
        with pytest.raises(CollaboratorError, match="Unknown collaborator 'nope'"):
            resolve_collaborator("nope")

    def test_register_non_callable(self) -> None:
        """Test that non-callables are refused."""
        with pytest.raises(CollaboratorError, match="not callable"):
            register_collaborator("bad", "not a factory")  # type: ignore[arg-type]


class TestBuildCollaborators:
    """Tests for build_collaborators."""

    def test_empty(self) -> None:
        """Test that no factories give no collaborators."""
        assert build_collaborators({}) == {}

    def test_instantiates_each_role(self) -> None:
        """Test that each factory is called with no arguments."""
        built = build_collaborators(
            {"http_client": resolve_collaborator("httpx"), "grant_factory": GrantFactory}
        )

        assert isinstance(built["http_client"], httpx.Client)
        assert isinstance(built["grant_factory"], GrantFactory)
        built["http_client"].close()

    def test_failing_factory(self) -> None:
        """Test that a failing factory raises CollaboratorError with the cause."""

        def explode() -> None:
            raise RuntimeError("boom")

        with pytest.raises(CollaboratorError, match="http_client") as exc_info:
            build_collaborators({"http_client": explode})

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_failing_factory_closes_built_instances(self) -> None:
        """Test that instances built before the failure are closed."""
        built: list[httpx.Client] = []

        def tracked_client() -> httpx.Client:
            client = httpx.Client()
            built.append(client)
            return client

        def explode() -> None:
            raise RuntimeError("boom")

        with pytest.raises(CollaboratorError, match="token_parser"):
            build_collaborators({"http_client": tracked_client, "token_parser": explode})

        assert built[0].is_closed


class TestCloseCollaborators:
    """Tests for close_collaborators."""

    def test_closes_only_closable(self) -> None:
        """Test that instances without close() are left alone."""
        client = httpx.Client()

        close_collaborators({"http_client": client, "grant_factory": GrantFactory()})

        assert client.is_closed
