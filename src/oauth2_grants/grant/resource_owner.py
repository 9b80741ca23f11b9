"""Resource owner password credentials grant."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from oauth2_grants.exceptions import Oauth2ClientError
from oauth2_grants.grant.base import GrantService
from oauth2_grants.logging_config import get_logger

if TYPE_CHECKING:
    from oauth2_grants.oauth.tokens import AccessToken

logger = get_logger(__name__)


class ResourceOwnerCredentialsGrantService(GrantService):
    """Exchanges a user's username and password for a token."""

    def get_access_token(
        self,
        client_id: str,
        username: str | None = None,
        password: str | None = None,
        **kwargs: Any,
    ) -> AccessToken:
        """Request a token with the resource owner's credentials.

        Raises:
            Oauth2ClientError: If username or password is missing
        """
        if not username or not password:
            msg = f"Client '{client_id}' requires a username and password"
            raise Oauth2ClientError(msg)

        provider = self.get_provider(client_id)
        logger.debug("Requesting password grant for %s on client %s", username, client_id)
        token = provider.get_access_token(
            "password", username=username, password=password, **kwargs
        )
        self.store_access_token(client_id, token)
        return token
