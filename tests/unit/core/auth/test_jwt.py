"""Tests for JWT token handling."""

from datetime import timedelta

import jwt
import pytest

from tenantry.core.auth.jwt import (
    ALGORITHM,
    SECRET_KEY,
    TokenError,
    create_access_token,
    decode_token,
)


class TestAccessToken:
    """Test access token creation and validation."""

    def test_round_trip(self) -> None:
        """Should decode the subject of a freshly created token."""
        token = create_access_token(user_id="user-123")

        payload = decode_token(token)

        assert payload.sub == "user-123"
        assert payload.exp > payload.iat

    def test_custom_lifetime(self) -> None:
        """Should honour an explicit lifetime."""
        token = create_access_token(user_id="user-123", expires_in=timedelta(minutes=5))

        payload = decode_token(token)

        assert payload.exp - payload.iat == 300

    def test_expired_token(self) -> None:
        """Should reject an expired token."""
        token = create_access_token(user_id="user-123", expires_in=timedelta(seconds=-10))

        with pytest.raises(TokenError, match="expired"):
            decode_token(token)

    def test_wrong_signature(self) -> None:
        """Should reject a token signed with another secret."""
        token = jwt.encode(
            {"sub": "user-123", "exp": 9999999999, "iat": 0},
            "another-secret",
            algorithm=ALGORITHM,
        )

        with pytest.raises(TokenError):
            decode_token(token)

    def test_missing_claims(self) -> None:
        """Should reject a token without a subject."""
        token = jwt.encode({"exp": 9999999999, "iat": 0}, SECRET_KEY, algorithm=ALGORITHM)

        with pytest.raises(TokenError):
            decode_token(token)

    def test_garbage(self) -> None:
        """Should reject input that is not a JWT."""
        with pytest.raises(TokenError):
            decode_token("not-a-token")
