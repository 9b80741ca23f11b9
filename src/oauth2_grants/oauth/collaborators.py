"""Named factories for provider collaborators.

Client definitions refer to collaborators by name (``"httpx"``,
``"grant_factory"``...). Names are resolved here when a client is
loaded, so a typo fails at load time rather than on first use. Every
factory must be callable with no arguments.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from oauth2_grants.exceptions import CollaboratorError
from oauth2_grants.logging_config import get_logger
from oauth2_grants.oauth.grants import GrantFactory
from oauth2_grants.oauth.provider import DEFAULT_TIMEOUT, TokenResponseParser

logger = get_logger(__name__)

CollaboratorFactory = Callable[[], Any]


def _default_http_client() -> httpx.Client:
    return httpx.Client(timeout=DEFAULT_TIMEOUT)


_registry: dict[str, CollaboratorFactory] = {
    "httpx": _default_http_client,
    "grant_factory": GrantFactory,
    "token_parser": TokenResponseParser,
}


def register_collaborator(name: str, factory: CollaboratorFactory) -> None:
    """Register a zero-argument factory under a name.

    Raises:
        CollaboratorError: If factory is not callable
    """
    if not callable(factory):
        msg = f"Collaborator factory '{name}' is not callable"
        raise CollaboratorError(msg)
    _registry[name] = factory
    logger.debug("Registered collaborator factory %s", name)


def unregister_collaborator(name: str) -> None:
    _registry.pop(name, None)


def resolve_collaborator(name: str) -> CollaboratorFactory:
    """Look up a factory by name.

    Raises:
        CollaboratorError: If no factory is registered under that name
    """
    try:
        return _registry[name]
    except KeyError:
        msg = f"Unknown collaborator '{name}' (registered: {', '.join(sorted(_registry))})"
        raise CollaboratorError(msg) from None


def registered_collaborators() -> list[str]:
    return sorted(_registry)


def close_collaborators(instances: dict[str, Any]) -> None:
    """Close every collaborator instance that exposes a close() method."""
    for role, instance in instances.items():
        close = getattr(instance, "close", None)
        if callable(close):
            close()
            logger.debug("Closed collaborator %s", role)


def build_collaborators(factories: dict[str, CollaboratorFactory]) -> dict[str, Any]:
    """Instantiate each factory with no arguments.

    Instances already built are closed again if a later factory fails.

    Args:
        factories: Mapping of role name to factory

    Returns:
        Mapping of role name to collaborator instance

    Raises:
        CollaboratorError: If any factory raises
    """
    instances: dict[str, Any] = {}
    for role, factory in factories.items():
        try:
            instances[role] = factory()
        except Exception as e:
            close_collaborators(instances)
            msg = f"Failed to construct collaborator '{role}': {e}"
            raise CollaboratorError(msg) from e
    return instances
