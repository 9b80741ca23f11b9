"""OAuth2 client definitions and the registry that resolves them.

Each client is registered under an ``id`` of its own, distinct from the
OAuth ``client_id`` credential, so one authorization server can be
configured more than once (for example with different scopes).

Client files look like::

    clients:
      github:
        client_id: abc
        client_secret: s3cr3t
        grant_type: authorization_code
        authorization_uri: https://github.com/login/oauth/authorize
        token_uri: https://github.com/login/oauth/access_token
        scopes: [repo, user]
        scope_separator: " "
        collaborators:
          http_client: httpx
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from oauth2_grants.config import ConfigError, read_structured_file
from oauth2_grants.exceptions import InvalidClientError
from oauth2_grants.logging_config import get_logger
from oauth2_grants.oauth.collaborators import resolve_collaborator

logger = get_logger(__name__)


class GrantType(str, Enum):
    """Grant a client uses to obtain its first token."""

    AUTHORIZATION_CODE = "authorization_code"
    CLIENT_CREDENTIALS = "client_credentials"
    PASSWORD = "password"  # noqa: S105


class ClientConfig(BaseModel):
    """Immutable description of one OAuth2 client."""

    id: str = Field(min_length=1, description="Registry identifier")
    name: str | None = Field(default=None, description="Display label")
    grant_type: GrantType = Field(default=GrantType.AUTHORIZATION_CODE)
    client_id: str = Field(min_length=1, description="OAuth client identifier")
    client_secret: SecretStr | None = Field(default=None, description="OAuth client secret")
    authorization_uri: str = Field(description="Authorization endpoint URL")
    token_uri: str = Field(description="Token endpoint URL")
    resource_uri: str | None = Field(
        default=None, description="Resource owner details endpoint URL"
    )
    scopes: tuple[str, ...] = Field(default=(), description="Scopes requested by default")
    scope_separator: str = Field(default=",", description="Separator used to join scopes")
    collaborators: dict[str, Callable[[], Any]] = Field(
        default_factory=dict,
        description="Zero-argument collaborator factories keyed by role",
    )

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("grant_type", mode="before")
    @classmethod
    def normalize_grant_type(cls, v: Any) -> Any:
        """Normalize grant type to lowercase."""
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("collaborators", mode="before")
    @classmethod
    def resolve_collaborators(cls, v: Any) -> Any:
        """Resolve collaborator names to factories.

        An unknown name raises CollaboratorError from here, so bad
        client definitions fail when they are loaded.
        """
        if v is None:
            return {}
        if not isinstance(v, dict):
            msg = "collaborators must be a mapping of role to factory"
            raise ValueError(msg)
        resolved: dict[str, Any] = {}
        for role, factory in v.items():
            if isinstance(factory, str):
                factory = resolve_collaborator(factory)
            if not callable(factory):
                msg = f"collaborator '{role}' is not callable"
                raise ValueError(msg)
            resolved[role] = factory
        return resolved

    @property
    def label(self) -> str:
        return self.name or self.id

    def secret_value(self) -> str | None:
        """Return the client secret in clear text, if any."""
        return self.client_secret.get_secret_value() if self.client_secret else None


class ClientRegistry:
    """Resolves client identifiers to their configuration."""

    def __init__(self, clients: Iterable[ClientConfig] = ()) -> None:
        self._clients: dict[str, ClientConfig] = {}
        for client in clients:
            self.register(client)

    def register(self, client: ClientConfig) -> None:
        """Add or replace a client definition."""
        self._clients[client.id] = client
        logger.debug("Registered OAuth2 client %s", client.id)

    def get_client(self, client_id: str) -> ClientConfig:
        """Return the client registered under client_id.

        Raises:
            InvalidClientError: If no such client exists
        """
        try:
            return self._clients[client_id]
        except KeyError:
            raise InvalidClientError(client_id) from None

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._clients

    def __iter__(self) -> Iterator[ClientConfig]:
        return iter(self._clients.values())

    def __len__(self) -> int:
        return len(self._clients)

    @classmethod
    def from_mapping(cls, data: Any) -> ClientRegistry:
        """Build a registry from parsed client definitions.

        Accepts ``{"clients": {...}}``, ``{"clients": [...]}`` or a bare
        mapping of id to definition. In mappings the key becomes the id
        unless the definition sets one.

        Raises:
            ConfigError: If a definition is invalid
        """
        if isinstance(data, dict) and "clients" in data:
            data = data["clients"]

        if data is None:
            definitions: list[dict[str, Any]] = []
        elif isinstance(data, dict):
            definitions = []
            for key, definition in data.items():
                if not isinstance(definition, dict):
                    msg = f"Client '{key}' must be a mapping"
                    raise ConfigError(msg)
                definitions.append({"id": key, **definition})
        elif isinstance(data, list):
            definitions = list(data)
        else:
            msg = "Client definitions must be a mapping or a list"
            raise ConfigError(msg)

        registry = cls()
        for definition in definitions:
            if not isinstance(definition, dict):
                msg = "Each client definition must be a mapping"
                raise ConfigError(msg)
            try:
                registry.register(ClientConfig(**definition))
            except ValidationError as e:
                msg = f"Invalid client definition '{definition.get('id', '?')}': {e}"
                raise ConfigError(msg) from e
        return registry

    @classmethod
    def from_file(cls, path: str | Path) -> ClientRegistry:
        """Load client definitions from a JSON or YAML file.

        Raises:
            ConfigError: If the file cannot be read or a definition is invalid
            CollaboratorError: If a definition names an unknown collaborator
        """
        logger.debug("Loading OAuth2 clients from %s", path)
        registry = cls.from_mapping(read_structured_file(path))
        logger.info("Loaded %d OAuth2 client(s) from %s", len(registry), path)
        return registry
