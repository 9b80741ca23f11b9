"""OAuth2 wire protocol: provider, grants, tokens and storage."""

from oauth2_grants.oauth.collaborators import (
    build_collaborators,
    close_collaborators,
    register_collaborator,
    resolve_collaborator,
)
from oauth2_grants.oauth.grants import (
    AbstractGrant,
    AuthorizationCodeGrant,
    ClientCredentialsGrant,
    GrantFactory,
    PasswordGrant,
    RefreshTokenGrant,
)
from oauth2_grants.oauth.provider import Provider, TokenResponseParser
from oauth2_grants.oauth.token_store import (
    EncryptedFileStateStore,
    InMemoryStateStore,
    StateStore,
    create_state_store,
)
from oauth2_grants.oauth.tokens import AccessToken

__all__ = [
    "AbstractGrant",
    "AccessToken",
    "AuthorizationCodeGrant",
    "ClientCredentialsGrant",
    "EncryptedFileStateStore",
    "GrantFactory",
    "InMemoryStateStore",
    "PasswordGrant",
    "Provider",
    "RefreshTokenGrant",
    "StateStore",
    "TokenResponseParser",
    "build_collaborators",
    "close_collaborators",
    "create_state_store",
    "register_collaborator",
    "resolve_collaborator",
]
