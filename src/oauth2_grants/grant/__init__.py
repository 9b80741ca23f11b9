"""Grant services, one per OAuth2 grant type."""

from oauth2_grants.grant.authorization_code import AuthorizationCodeGrantService
from oauth2_grants.grant.base import GrantService, access_token_key
from oauth2_grants.grant.client_credentials import ClientCredentialsGrantService
from oauth2_grants.grant.refresh_token import RefreshTokenGrantService
from oauth2_grants.grant.resource_owner import ResourceOwnerCredentialsGrantService

__all__ = [
    "AuthorizationCodeGrantService",
    "ClientCredentialsGrantService",
    "GrantService",
    "RefreshTokenGrantService",
    "ResourceOwnerCredentialsGrantService",
    "access_token_key",
]
