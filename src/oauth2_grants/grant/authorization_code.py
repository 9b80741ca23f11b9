"""Authorization code grant."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from oauth2_grants.exceptions import AuthorizationRequired, StateMismatchError
from oauth2_grants.grant.base import GrantService
from oauth2_grants.logging_config import get_logger
from oauth2_grants.security import constant_time_equals

if TYPE_CHECKING:
    from oauth2_grants.oauth.tokens import AccessToken

logger = get_logger(__name__)

STATE_KEY_PREFIX = "oauth2_client_state-"


def state_key(client_id: str) -> str:
    """Storage key of the pending authorization state for a client."""
    return f"{STATE_KEY_PREFIX}{client_id}"


class AuthorizationCodeGrantService(GrantService):
    """Runs the authorization code grant.

    The flow spans two requests: the first sends the user agent to the
    authorization URL, the second (the callback on the redirect URI)
    carries ``code`` and ``state`` back for the exchange.
    """

    def get_authorization_url(self, client_id: str, **options: Any) -> str:
        """Build the authorization URL and remember its state.

        Args:
            client_id: Registry id of the client
            **options: Extra authorization request parameters

        Returns:
            URL to redirect the user agent to
        """
        provider = self.get_provider(client_id)
        url = provider.get_authorization_url(**options)
        self.store.set(state_key(client_id), provider.state)
        logger.info("Started authorization for client %s", client_id)
        return url

    def get_access_token(self, client_id: str, **kwargs: Any) -> AccessToken:
        """Always raises: the user agent has to visit the authorization server.

        Raises:
            AuthorizationRequired: Carrying the authorization URL
        """
        raise AuthorizationRequired(client_id, self.get_authorization_url(client_id, **kwargs))

    def request_access_token(self, client_id: str, code: str, state: str | None) -> AccessToken:
        """Exchange the code received on the callback for a token.

        Args:
            client_id: Registry id of the client
            code: Authorization code from the callback
            state: State from the callback

        Returns:
            The stored AccessToken

        Raises:
            StateMismatchError: If state does not match the pending state
            IdentityProviderError: If the exchange fails
        """
        provider = self.get_provider(client_id)
        self.validate_state(client_id, state)

        token = provider.get_access_token("authorization_code", code=code)
        self.store_access_token(client_id, token)
        return token

    def validate_state(self, client_id: str, state: str | None) -> None:
        """Consume the pending state and compare it to the callback's.

        Raises:
            StateMismatchError: If nothing is pending or the values differ
        """
        key = state_key(client_id)
        expected = self.store.get(key)
        self.store.delete(key)

        if not isinstance(expected, str) or not state or not constant_time_equals(expected, state):
            logger.warning("State mismatch on callback for client %s", client_id)
            msg = f"Invalid state for client '{client_id}'"
            raise StateMismatchError(msg)
