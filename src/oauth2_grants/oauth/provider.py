"""Generic OAuth2 provider.

A Provider is bound to one client: it knows the authorization, token and
resource-owner endpoints, the client credentials and the requested
scopes. It builds authorization URLs and performs token requests through
its collaborators (an httpx client, a grant factory and a token response
parser), any of which can be replaced per client.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx

from oauth2_grants.exceptions import IdentityProviderError
from oauth2_grants.logging_config import get_logger
from oauth2_grants.oauth.grants import AbstractGrant, GrantFactory
from oauth2_grants.oauth.tokens import AccessToken
from oauth2_grants.security import generate_state, redact

logger = get_logger(__name__)

# Default HTTP timeout for OAuth requests
DEFAULT_TIMEOUT = 30.0


class TokenResponseParser:
    """Turns token endpoint responses into dicts, raising on errors."""

    def parse(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a token endpoint response.

        Args:
            response: Raw HTTP response

        Returns:
            Decoded JSON body

        Raises:
            IdentityProviderError: On a non-JSON body, an HTTP error status
                or an ``error`` member in the body
        """
        try:
            data = response.json()
        except ValueError:
            raise IdentityProviderError(
                "Invalid response received from authorization server. Expected JSON.",
                response.status_code,
                response.text,
            ) from None

        if not isinstance(data, dict):
            raise IdentityProviderError(
                "Invalid response received from authorization server. Expected JSON object.",
                response.status_code,
                response.text,
            )

        if response.is_error or "error" in data:
            error = data.get("error", response.reason_phrase)
            description = data.get("error_description")
            message = f"{error}: {description}" if description else str(error)
            raise IdentityProviderError(message, response.status_code, data)

        return data


class Provider:
    """OAuth2 provider bound to a single client."""

    def __init__(
        self,
        client_id: str,
        client_secret: str | None,
        redirect_uri: str,
        authorization_uri: str,
        token_uri: str,
        resource_uri: str | None = None,
        scopes: list[str] | None = None,
        scope_separator: str = ",",
        collaborators: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            client_id: OAuth client identifier
            client_secret: OAuth client secret (None for public clients)
            redirect_uri: Absolute callback URL
            authorization_uri: Authorization endpoint
            token_uri: Token endpoint
            resource_uri: Resource owner details endpoint
            scopes: Scopes requested by default
            scope_separator: Separator used to join scopes
            collaborators: Collaborator instances keyed by role; recognised
                roles are ``http_client``, ``grant_factory`` and
                ``token_parser``
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.authorization_uri = authorization_uri
        self.token_uri = token_uri
        self.resource_uri = resource_uri
        self.scopes = list(scopes or [])
        self.scope_separator = scope_separator
        self.collaborators: dict[str, Any] = dict(collaborators or {})

        self._http_client: httpx.Client | None = self.collaborators.get("http_client")
        self._owns_client = self._http_client is None
        self.grant_factory: GrantFactory = self.collaborators.get("grant_factory") or GrantFactory()
        self.token_parser: TokenResponseParser = (
            self.collaborators.get("token_parser") or TokenResponseParser()
        )
        self._state: str | None = None

    @property
    def scope_string(self) -> str:
        """Default scopes joined with the scope separator."""
        return self.scope_separator.join(self.scopes)

    @property
    def state(self) -> str | None:
        """The state generated by the last get_authorization_url call."""
        return self._state

    @property
    def http_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=DEFAULT_TIMEOUT)
        return self._http_client

    def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def get_authorization_url(self, **options: Any) -> str:
        """Build the URL the user agent is sent to for authorization.

        Options override the defaults (``state``, ``scope``,
        ``response_type``, ``approval_prompt``, ``redirect_uri``). A list
        given as ``scope`` is joined with the scope separator.

        Returns:
            Authorization URL
        """
        state = options.pop("state", None) or generate_state()
        scope = options.pop("scope", None)
        if scope is None:
            scope = self.scope_string
        elif isinstance(scope, list | tuple):
            scope = self.scope_separator.join(scope)

        params: dict[str, Any] = {
            "state": state,
            "scope": scope,
            "response_type": "code",
            "approval_prompt": "auto",
            "redirect_uri": self.redirect_uri,
        }
        params.update(options)
        params["client_id"] = self.client_id
        self._state = state

        separator = "&" if "?" in self.authorization_uri else "?"
        url = f"{self.authorization_uri}{separator}{urlencode(params)}"
        logger.debug("Created authorization URL for client %s", self.client_id)
        return url

    def get_access_token(self, grant: str | AbstractGrant, **options: Any) -> AccessToken:
        """Request an access token from the token endpoint.

        Args:
            grant: Grant instance or registered grant name
            **options: Grant parameters (``code``, ``refresh_token``...)

        Returns:
            The issued AccessToken

        Raises:
            ValueError: If the grant is unknown or parameters are missing
            IdentityProviderError: If the request fails or is rejected
        """
        if not isinstance(grant, AbstractGrant):
            grant = self.grant_factory.get_grant(grant)

        defaults: dict[str, Any] = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        }
        if self.client_secret:
            defaults["client_secret"] = self.client_secret
        params = grant.prepare_request_parameters(defaults, options)

        logger.debug(
            "Requesting %s token (client: %s, secret: %s)",
            grant.name,
            self.client_id,
            redact(self.client_secret),
        )

        try:
            response = self.http_client.post(
                self.token_uri,
                data=params,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error("Token request to %s failed: %s", self.token_uri, e)
            raise IdentityProviderError(f"Token request failed: {e}") from e

        data = self.token_parser.parse(response)
        token = self.create_access_token(data, grant)
        logger.info("Obtained %s token for client %s", grant.name, self.client_id)
        return token

    def create_access_token(self, response: dict[str, Any], grant: AbstractGrant) -> AccessToken:
        """Build the token object for a parsed response.

        Raises:
            IdentityProviderError: If the response does not describe a token
        """
        try:
            return AccessToken.from_token_response(response)
        except (ValueError, TypeError) as e:
            raise IdentityProviderError(
                f"Invalid {grant.name} token response: {e}", response_body=response
            ) from e

    def get_resource_owner(self, token: AccessToken) -> dict[str, Any]:
        """Fetch resource owner details with the given token.

        Raises:
            IdentityProviderError: If the endpoint is not configured or the
                request fails
        """
        if not self.resource_uri:
            raise IdentityProviderError("Resource owner details endpoint not configured")

        try:
            response = self.http_client.get(
                self.resource_uri,
                headers={
                    "Authorization": f"Bearer {token.access_token}",
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.error("Resource owner request failed: %s", e)
            raise IdentityProviderError(f"Resource owner request failed: {e}") from e

        return self.token_parser.parse(response)
