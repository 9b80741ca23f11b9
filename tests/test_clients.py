"""Tests for client definitions and the client registry."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from oauth2_grants.clients import ClientConfig, ClientRegistry, GrantType
from oauth2_grants.config import ConfigError
from oauth2_grants.exceptions import CollaboratorError, InvalidClientError
from oauth2_grants.oauth.grants import GrantFactory

if TYPE_CHECKING:
    from pathlib import Path

BASE = {
    "client_id": "abc",
    "authorization_uri": "https://auth.example.com/authorize",
    "token_uri": "https://auth.example.com/token",
}


class TestClientConfig:
    """Tests for ClientConfig model."""

    def test_defaults(self) -> None:
        """Test default values."""
        client = ClientConfig(id="c1", **BASE)

        assert client.grant_type is GrantType.AUTHORIZATION_CODE
        assert client.scopes == ()
        assert client.scope_separator == ","
        assert client.collaborators == {}
        assert client.secret_value() is None
        assert client.label == "c1"

    def test_is_frozen(self) -> None:
        """Test that client definitions are immutable."""
        client = ClientConfig(id="c1", **BASE)

        with pytest.raises(ValidationError):
            client.token_uri = "https://elsewhere"  # type: ignore[misc]

    def test_secret_is_hidden(self) -> None:
        """Test that the secret is not exposed in repr."""
        client = ClientConfig(id="c1", client_secret="hunter2", **BASE)

        assert "hunter2" not in repr(client)
        assert client.secret_value() == "hunter2"

    def test_grant_type_normalization(self) -> None:
        """Test that grant types are case-insensitive."""
        client = ClientConfig(id="c1", grant_type="CLIENT_CREDENTIALS", **BASE)  # type: ignore[arg-type]
        assert client.grant_type is GrantType.CLIENT_CREDENTIALS

    def test_collaborator_names_resolved(self) -> None:
        """Test that collaborator names resolve to factories at load time."""
        client = ClientConfig(id="c1", collaborators={"grant_factory": "grant_factory"}, **BASE)

        assert client.collaborators["grant_factory"] is GrantFactory

    def test_unknown_collaborator_fails_at_load(self) -> None:
        """Test that unknown collaborator names are rejected immediately."""
        with pytest.raises(CollaboratorError, match="does_not_exist"):
            ClientConfig(id="c1", collaborators={"http_client": "does_not_exist"}, **BASE)

    def test_non_callable_collaborator(self) -> None:
        """Test that non-callable collaborators are rejected."""
        with pytest.raises(ValidationError):
            ClientConfig(id="c1", collaborators={"http_client": 42}, **BASE)

    def test_null_collaborators(self) -> None:
        """Test that a null collaborator map means none."""
        assert ClientConfig(id="c1", collaborators=None, **BASE).collaborators == {}


class TestClientRegistry:
    """Tests for ClientRegistry."""

    def test_get_client(self, registry: ClientRegistry) -> None:
        """Test resolving a registered client."""
        assert registry.get_client("svc1").client_id == "svc1"
        assert "svc1" in registry
        assert len(registry) == 3

    def test_unknown_client(self, registry: ClientRegistry) -> None:
        """Test that unknown ids raise InvalidClientError."""
        with pytest.raises(InvalidClientError, match="ghost"):
            registry.get_client("ghost")

    def test_from_mapping_uses_keys_as_ids(self) -> None:
        """Test that mapping keys become client ids."""
        registry = ClientRegistry.from_mapping({"clients": {"one": BASE, "two": BASE}})

        assert sorted(c.id for c in registry) == ["one", "two"]

    def test_from_mapping_list(self) -> None:
        """Test loading a list of definitions."""
        registry = ClientRegistry.from_mapping([{"id": "one", **BASE}])

        assert registry.get_client("one").client_id == "abc"

    def test_from_mapping_invalid(self) -> None:
        """Test that invalid definitions raise ConfigError."""
        with pytest.raises(ConfigError, match="broken"):
            ClientRegistry.from_mapping({"broken": {"client_id": "x"}})

    def test_from_mapping_wrong_shape(self) -> None:
        """Test that non-mapping definitions raise ConfigError."""
        with pytest.raises(ConfigError):
            ClientRegistry.from_mapping({"clients": "nope"})
        with pytest.raises(ConfigError):
            ClientRegistry.from_mapping({"one": ["x"]})

    def test_from_json_file(self, tmp_path: Path) -> None:
        """Test loading clients from a JSON file."""
        path = tmp_path / "clients.json"
        path.write_text(json.dumps({"clients": {"svc": {**BASE, "grant_type": "client_credentials"}}}))

        registry = ClientRegistry.from_file(path)

        assert registry.get_client("svc").grant_type is GrantType.CLIENT_CREDENTIALS

    def test_from_yaml_file(self, tmp_path: Path) -> None:
        """Test loading clients from a YAML file."""
        path = tmp_path / "clients.yaml"
        path.write_text(
            "clients:\n"
            "  github:\n"
            "    client_id: gh\n"
            "    authorization_uri: https://github.com/login/oauth/authorize\n"
            "    token_uri: https://github.com/login/oauth/access_token\n"
            "    scopes: [repo, user]\n"
            "    scope_separator: ' '\n"
            "    collaborators:\n"
            "      http_client: httpx\n"
        )

        client = ClientRegistry.from_file(path).get_client("github")

        assert client.scopes == ("repo", "user")
        assert client.scope_separator == " "
        assert "http_client" in client.collaborators
