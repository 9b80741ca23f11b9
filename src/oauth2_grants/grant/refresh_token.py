"""Refresh token grant."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any

from oauth2_grants.exceptions import Oauth2ClientError
from oauth2_grants.grant.base import GrantService
from oauth2_grants.logging_config import get_logger

if TYPE_CHECKING:
    from oauth2_grants.oauth.tokens import AccessToken

logger = get_logger(__name__)


class RefreshTokenGrantService(GrantService):
    """Replaces a client's stored token using its refresh token."""

    def get_access_token(self, client_id: str, **kwargs: Any) -> AccessToken:
        """Refresh the stored token.

        The previous refresh token is kept when the server does not
        issue a new one.

        Raises:
            Oauth2ClientError: If no refreshable token is stored
        """
        current = self.retrieve_access_token(client_id)
        if current is None or not current.refresh_token:
            msg = f"No refresh token is stored for client '{client_id}'"
            raise Oauth2ClientError(msg)

        provider = self.get_provider(client_id)
        logger.debug("Refreshing access token for client %s", client_id)
        token = provider.get_access_token(
            "refresh_token", refresh_token=current.refresh_token, **kwargs
        )
        if not token.refresh_token:
            token = replace(token, refresh_token=current.refresh_token)

        self.store_access_token(client_id, token)
        return token
