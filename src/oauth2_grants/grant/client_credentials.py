"""Client credentials grant."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from oauth2_grants.grant.base import GrantService

if TYPE_CHECKING:
    from oauth2_grants.oauth.tokens import AccessToken


class ClientCredentialsGrantService(GrantService):
    """Obtains tokens for the client itself, no user involved."""

    def get_access_token(self, client_id: str, **kwargs: Any) -> AccessToken:
        """Request a token with the client's own credentials.

        Extra keyword arguments are sent as request parameters.
        """
        provider = self.get_provider(client_id)
        token = provider.get_access_token("client_credentials", **kwargs)
        self.store_access_token(client_id, token)
        return token
