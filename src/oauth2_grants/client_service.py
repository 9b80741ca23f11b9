"""Front door for obtaining access tokens.

Oauth2ClientService hands out a usable token for a client: the stored
one while it is valid, a refreshed one once it has expired, or a fresh
one from the client's configured grant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from oauth2_grants.clients import GrantType
from oauth2_grants.grant import (
    AuthorizationCodeGrantService,
    ClientCredentialsGrantService,
    GrantService,
    RefreshTokenGrantService,
    ResourceOwnerCredentialsGrantService,
)
from oauth2_grants.grant.base import access_token_key
from oauth2_grants.logging_config import get_logger
from oauth2_grants.oauth.tokens import AccessToken

if TYPE_CHECKING:
    from types import TracebackType

    from oauth2_grants.clients import ClientRegistry
    from oauth2_grants.oauth.token_store import StateStore
    from oauth2_grants.redirect import RequestContext

logger = get_logger(__name__)

REFRESH_TOKEN = "refresh_token"  # noqa: S105

GRANT_SERVICES: dict[str, type[GrantService]] = {
    GrantType.AUTHORIZATION_CODE.value: AuthorizationCodeGrantService,
    GrantType.CLIENT_CREDENTIALS.value: ClientCredentialsGrantService,
    GrantType.PASSWORD.value: ResourceOwnerCredentialsGrantService,
    REFRESH_TOKEN: RefreshTokenGrantService,
}


class Oauth2ClientService:
    """Returns access tokens for configured clients."""

    def __init__(
        self,
        request_context: RequestContext,
        store: StateStore,
        clients: ClientRegistry,
    ) -> None:
        self.request_context = request_context
        self.store = store
        self.clients = clients
        self._services: dict[str, GrantService] = {}

    def __enter__(self) -> Oauth2ClientService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        for service in self._services.values():
            service.close()

    def get_grant_service(self, grant_type: str) -> GrantService:
        """Return the grant service for a grant type, creating it once.

        Raises:
            ValueError: If the grant type is unknown
        """
        service = self._services.get(grant_type)
        if service is None:
            try:
                service_class = GRANT_SERVICES[grant_type]
            except KeyError:
                msg = f"Unsupported grant type '{grant_type}'"
                raise ValueError(msg) from None
            service = service_class(self.request_context, self.store, self.clients)
            self._services[grant_type] = service
        return service

    def get_access_token(
        self,
        client_id: str,
        username: str | None = None,
        password: str | None = None,
    ) -> AccessToken:
        """Return a valid access token for a client.

        Args:
            client_id: Registry id of the client
            username: Resource owner username (password grant only)
            password: Resource owner password (password grant only)

        Raises:
            InvalidClientError: If the client does not exist
            AuthorizationRequired: If an authorization code client has no
                usable token yet
            IdentityProviderError: If a token request fails
        """
        client = self.clients.get_client(client_id)

        token = self.retrieve_access_token(client_id)
        if token is not None:
            if token.expires is None or not token.has_expired():
                return token
            if token.refresh_token:
                logger.info("Access token for client %s expired, refreshing", client_id)
                return self.get_grant_service(REFRESH_TOKEN).get_access_token(client_id)
            logger.info("Access token for client %s expired without refresh token", client_id)

        service = self.get_grant_service(client.grant_type.value)
        if client.grant_type is GrantType.PASSWORD:
            return service.get_access_token(client_id, username=username, password=password)
        return service.get_access_token(client_id)

    def retrieve_access_token(self, client_id: str) -> AccessToken | None:
        """Return the stored token for a client without validating it."""
        value = self.store.get(access_token_key(client_id))
        return value if isinstance(value, AccessToken) else None

    def clear_access_token(self, client_id: str) -> None:
        self.store.delete(access_token_key(client_id))
        logger.info("Cleared access token for client %s", client_id)
