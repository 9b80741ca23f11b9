"""OAuth2 client grant engine.

Builds and caches OAuth2 providers per configured client, runs the
authorization code, client credentials, password and refresh token
grants, and persists the issued tokens.
"""

__version__ = "0.1.0"

from oauth2_grants.client_service import Oauth2ClientService
from oauth2_grants.clients import ClientConfig, ClientRegistry, GrantType
from oauth2_grants.config import ConfigError, Settings, load_config
from oauth2_grants.exceptions import (
    AuthorizationRequired,
    CollaboratorError,
    IdentityProviderError,
    InvalidClientError,
    Oauth2ClientError,
    StateMismatchError,
    TokenStoreError,
)
from oauth2_grants.grant import (
    AuthorizationCodeGrantService,
    ClientCredentialsGrantService,
    GrantService,
    RefreshTokenGrantService,
    ResourceOwnerCredentialsGrantService,
)
from oauth2_grants.oauth import AccessToken, Provider
from oauth2_grants.redirect import (
    RedirectUriResolver,
    RequestContext,
    StarletteRequestContext,
    StaticRequestContext,
)

__all__ = [
    "AccessToken",
    "AuthorizationCodeGrantService",
    "AuthorizationRequired",
    "ClientConfig",
    "ClientCredentialsGrantService",
    "ClientRegistry",
    "CollaboratorError",
    "ConfigError",
    "GrantService",
    "GrantType",
    "IdentityProviderError",
    "InvalidClientError",
    "Oauth2ClientError",
    "Oauth2ClientService",
    "Provider",
    "RedirectUriResolver",
    "RefreshTokenGrantService",
    "RequestContext",
    "ResourceOwnerCredentialsGrantService",
    "Settings",
    "StarletteRequestContext",
    "StateMismatchError",
    "StaticRequestContext",
    "TokenStoreError",
    "__version__",
    "load_config",
]
