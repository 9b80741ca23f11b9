"""Access token value object."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

# Fields of a token response that are mapped onto AccessToken attributes
_KNOWN_FIELDS = frozenset(
    {"access_token", "refresh_token", "expires_in", "expires", "resource_owner_id"}
)


@dataclass(frozen=True)
class AccessToken:
    """An access token issued by an authorization server.

    Attributes:
        access_token: The bearer credential
        refresh_token: Refresh token, if the server issued one
        expires: Expiry time, if the server reported one
        resource_owner_id: Identifier of the resource owner, if known
        values: Any additional fields from the token response
    """

    access_token: str
    refresh_token: str | None = None
    expires: datetime | None = None
    resource_owner_id: str | None = None
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def token_type(self) -> str:
        """Token type reported by the server, Bearer when absent."""
        return str(self.values.get("token_type", "Bearer"))

    def has_expired(self) -> bool:
        """Check whether the token has expired.

        Raises:
            ValueError: If the token carries no expiry
        """
        if self.expires is None:
            msg = '"expires" is not set on the token'
            raise ValueError(msg)
        return self.expires <= datetime.now(UTC)

    @classmethod
    def from_token_response(
        cls,
        response: dict[str, Any],
        resource_owner_id: str | None = None,
    ) -> AccessToken:
        """Create an AccessToken from a token endpoint response body.

        ``expires_in`` is relative seconds; ``expires`` is an absolute
        Unix timestamp. ``expires_in`` wins when both are present.

        Raises:
            ValueError: If access_token is missing or expiry is not numeric
        """
        if not response.get("access_token"):
            msg = 'Required option not passed: "access_token"'
            raise ValueError(msg)

        expires: datetime | None = None
        if response.get("expires_in") is not None:
            expires = datetime.now(UTC) + timedelta(seconds=int(response["expires_in"]))
        elif response.get("expires") is not None:
            expires = datetime.fromtimestamp(int(response["expires"]), tz=UTC)

        owner = resource_owner_id or response.get("resource_owner_id")

        return cls(
            access_token=str(response["access_token"]),
            refresh_token=response.get("refresh_token"),
            expires=expires,
            resource_owner_id=str(owner) if owner is not None else None,
            values={k: v for k, v in response.items() if k not in _KNOWN_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict for storage."""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires": self.expires.isoformat() if self.expires else None,
            "resource_owner_id": self.resource_owner_id,
            "values": dict(self.values),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccessToken:
        """Rebuild a token serialized with to_dict."""
        expires = data.get("expires")
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token"),
            expires=datetime.fromisoformat(expires) if expires else None,
            resource_owner_id=data.get("resource_owner_id"),
            values=dict(data.get("values") or {}),
        )
