"""Exceptions raised by the OAuth2 grant engine."""

from __future__ import annotations


class Oauth2ClientError(Exception):
    """Base exception for OAuth2 client operations."""


class InvalidClientError(Oauth2ClientError):
    """Raised when a client identifier has no configuration.

    Attributes:
        client_id: The identifier that failed to resolve
    """

    def __init__(self, client_id: str, message: str | None = None) -> None:
        self.client_id = client_id
        super().__init__(message or f"No OAuth2 client is configured with id '{client_id}'")


class CollaboratorError(Oauth2ClientError):
    """Raised when a provider collaborator cannot be resolved or built."""


class IdentityProviderError(Oauth2ClientError):
    """Raised when the authorization server rejects or fails a request.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (if applicable)
        response_body: Decoded response body (if available)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict | str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class StateMismatchError(Oauth2ClientError):
    """Raised when the callback state does not match the stored state."""


class AuthorizationRequired(Oauth2ClientError):  # noqa: N818
    """Raised when the user agent must be sent to the authorization server.

    Attributes:
        client_id: Client the authorization is for
        authorization_url: URL the user agent should be redirected to
    """

    def __init__(self, client_id: str, authorization_url: str) -> None:
        super().__init__(f"Authorization required for client '{client_id}'")
        self.client_id = client_id
        self.authorization_url = authorization_url


class TokenStoreError(Oauth2ClientError):
    """Error during token storage operations."""
