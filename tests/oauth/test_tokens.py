"""Tests for the AccessToken value object."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from oauth2_grants.oauth.tokens import AccessToken


class TestFromTokenResponse:
    """Tests for AccessToken.from_token_response."""

    def test_full_response(self) -> None:
        """Test mapping a complete token response."""
        token = AccessToken.from_token_response(
            {
                "access_token": "access123",
                "refresh_token": "refresh123",
                "expires_in": 3600,
                "token_type": "Bearer",
                "scope": "read write",
            }
        )

        assert token.access_token == "access123"
        assert token.refresh_token == "refresh123"
        assert token.expires is not None
        assert token.expires > datetime.now(UTC) + timedelta(minutes=59)
        assert token.token_type == "Bearer"
        assert token.values == {"token_type": "Bearer", "scope": "read write"}

    def test_absolute_expires(self) -> None:
        """Test that an absolute expires timestamp is honoured."""
        token = AccessToken.from_token_response({"access_token": "a", "expires": 2000000000})

        assert token.expires == datetime.fromtimestamp(2000000000, tz=UTC)

    def test_no_expiry(self) -> None:
        """Test a response without any expiry."""
        token = AccessToken.from_token_response({"access_token": "a"})

        assert token.expires is None
        assert token.refresh_token is None

    def test_missing_access_token(self) -> None:
        """Test that a response without access_token is rejected."""
        with pytest.raises(ValueError, match="access_token"):
            AccessToken.from_token_response({"token_type": "Bearer"})


class TestHasExpired:
    """Tests for AccessToken.has_expired."""

    def test_expired(self) -> None:
        """Test expiration check."""
        expired = AccessToken("a", expires=datetime.now(UTC) - timedelta(seconds=1))
        valid = AccessToken("a", expires=datetime.now(UTC) + timedelta(hours=1))

        assert expired.has_expired() is True
        assert valid.has_expired() is False

    def test_unknown_expiry_raises(self) -> None:
        """Test that a token without expiry cannot be checked."""
        with pytest.raises(ValueError, match="expires"):
            AccessToken("a").has_expired()


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_restores_token(self) -> None:
        """Test that a serialized token is restored with all fields."""
        token = AccessToken(
            access_token="a",
            refresh_token="r",
            expires=datetime(2030, 1, 1, tzinfo=UTC),
            resource_owner_id="42",
            values={"scope": "read"},
        )

        assert AccessToken.from_dict(token.to_dict()) == token

    def test_token_is_immutable(self) -> None:
        """Test that tokens cannot be modified."""
        token = AccessToken("a")

        with pytest.raises(AttributeError):
            token.access_token = "b"  # type: ignore[misc]
