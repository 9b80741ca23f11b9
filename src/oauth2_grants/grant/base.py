"""Base class for OAuth2 grant services.

A grant service is created for one inbound request or operation and
thrown away afterwards. It builds at most one Provider per client and
keeps it for its own lifetime; the cache is never invalidated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from oauth2_grants.logging_config import get_logger
from oauth2_grants.oauth.collaborators import build_collaborators, close_collaborators
from oauth2_grants.oauth.provider import Provider
from oauth2_grants.oauth.tokens import AccessToken
from oauth2_grants.redirect import RedirectUriResolver

if TYPE_CHECKING:
    from types import TracebackType

    from oauth2_grants.clients import ClientConfig, ClientRegistry
    from oauth2_grants.oauth.token_store import StateStore
    from oauth2_grants.redirect import RequestContext

logger = get_logger(__name__)

ACCESS_TOKEN_KEY_PREFIX = "oauth2_client_access_token-"  # noqa: S105


def access_token_key(client_id: str) -> str:
    """Storage key of the token issued for a client."""
    return f"{ACCESS_TOKEN_KEY_PREFIX}{client_id}"


class GrantService(ABC):
    """Shared plumbing for grant services.

    Subclasses implement get_access_token for one grant type by fetching
    the provider, running the exchange and storing the result.
    """

    def __init__(
        self,
        request_context: RequestContext,
        store: StateStore,
        clients: ClientRegistry,
        redirect_resolver: RedirectUriResolver | None = None,
    ) -> None:
        """Initialize the grant service.

        Args:
            request_context: The request this service runs within
            store: Store receiving issued tokens
            clients: Lookup resolving client ids to configuration
            redirect_resolver: Redirect URI strategy; defaults to the
                current route of request_context
        """
        self.request_context = request_context
        self.store = store
        self.clients = clients
        self.redirect_resolver = redirect_resolver or RedirectUriResolver(request_context)
        self._providers: dict[str, Provider] = {}
        # Collaborators built from client factories, owned by this service
        self._collaborators: dict[str, dict[str, Any]] = {}

    def __enter__(self) -> GrantService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release provider resources.

        Closes the HTTP clients providers created for themselves and every
        collaborator this service built from a client's factories.
        """
        for provider in self._providers.values():
            provider.close()
        for instances in self._collaborators.values():
            close_collaborators(instances)
        self._collaborators.clear()

    def get_client(self, client_id: str) -> ClientConfig:
        """Resolve a client id.

        Raises:
            InvalidClientError: If the client does not exist
        """
        return self.clients.get_client(client_id)

    def get_provider(self, client_id: str) -> Provider:
        """Return the provider for a client, building it on first use.

        Args:
            client_id: Registry id of the client

        Returns:
            The cached Provider for this service instance

        Raises:
            InvalidClientError: If the client does not exist
            CollaboratorError: If a collaborator cannot be constructed
        """
        provider = self._providers.get(client_id)
        if provider is not None:
            return provider

        client = self.get_client(client_id)
        collaborators = build_collaborators(client.collaborators)

        provider = Provider(
            client_id=client.client_id,
            client_secret=client.secret_value(),
            redirect_uri=self.get_redirect_uri(client),
            authorization_uri=client.authorization_uri,
            token_uri=client.token_uri,
            resource_uri=client.resource_uri,
            scopes=list(client.scopes),
            scope_separator=client.scope_separator,
            collaborators=collaborators,
        )
        self._providers[client_id] = provider
        self._collaborators[client_id] = collaborators
        logger.debug(
            "Built provider for client %s (collaborators: %s)",
            client_id,
            ", ".join(sorted(collaborators)) or "none",
        )
        return provider

    def get_redirect_uri(self, client: ClientConfig) -> str:
        return self.redirect_resolver.get_redirect_uri(client)

    def store_access_token(self, client_id: str, access_token: AccessToken) -> None:
        """Store a token for a client, overwriting any previous one."""
        self.store.set(access_token_key(client_id), access_token)
        logger.debug("Stored access token for client %s", client_id)

    def retrieve_access_token(self, client_id: str) -> AccessToken | None:
        """Return the stored token for a client, if any."""
        value = self.store.get(access_token_key(client_id))
        return value if isinstance(value, AccessToken) else None

    def clear_access_token(self, client_id: str) -> None:
        self.store.delete(access_token_key(client_id))
        logger.info("Cleared access token for client %s", client_id)

    @abstractmethod
    def get_access_token(self, client_id: str, **kwargs: Any) -> AccessToken:
        """Run this service's grant for a client and store the token."""
