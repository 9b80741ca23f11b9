"""OAuth2 grant types.

A grant knows its ``grant_type`` name and which request parameters it
needs; the provider merges those with the client credentials before
posting to the token endpoint.
"""

from __future__ import annotations

from typing import Any, ClassVar


class AbstractGrant:
    """Base class for grant types."""

    name: ClassVar[str]
    required_parameters: ClassVar[tuple[str, ...]] = ()

    def prepare_request_parameters(
        self,
        defaults: dict[str, Any],
        options: dict[str, Any],
    ) -> dict[str, Any]:
        """Build the form body for a token request.

        Args:
            defaults: Parameters supplied by the provider (client id, secret, redirect URI)
            options: Caller supplied parameters for this grant

        Returns:
            Form parameters including ``grant_type``

        Raises:
            ValueError: If a required parameter is missing
        """
        missing = [name for name in self.required_parameters if not options.get(name)]
        if missing:
            msg = f"Required parameter not passed: {', '.join(repr(m) for m in missing)}"
            raise ValueError(msg)

        params = {"grant_type": self.name}
        params.update(defaults)
        params.update(options)
        return params

    def __str__(self) -> str:
        return self.name


class AuthorizationCodeGrant(AbstractGrant):
    name = "authorization_code"
    required_parameters = ("code",)


class ClientCredentialsGrant(AbstractGrant):
    name = "client_credentials"


class PasswordGrant(AbstractGrant):
    name = "password"
    required_parameters = ("username", "password")


class RefreshTokenGrant(AbstractGrant):
    name = "refresh_token"
    required_parameters = ("refresh_token",)


class GrantFactory:
    """Resolves grant names to grant instances.

    Custom grants can be added with ``set_grant``.
    """

    def __init__(self) -> None:
        self._registry: dict[str, AbstractGrant] = {}
        for grant_class in (
            AuthorizationCodeGrant,
            ClientCredentialsGrant,
            PasswordGrant,
            RefreshTokenGrant,
        ):
            self.set_grant(grant_class.name, grant_class())

    def set_grant(self, name: str, grant: AbstractGrant) -> None:
        """Register a grant under a name."""
        self._registry[name] = grant

    def get_grant(self, name: str) -> AbstractGrant:
        """Return the grant registered under ``name``.

        Raises:
            ValueError: If no such grant is registered
        """
        try:
            return self._registry[name]
        except KeyError:
            msg = f"Grant '{name}' is not registered"
            raise ValueError(msg) from None
