"""Tests for JWT authentication middleware."""

from datetime import timedelta
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from tenantry.core.auth.jwt import create_access_token
from tenantry.entrypoints.api.middleware.jwt_auth import verify_jwt


class TestVerifyJwt:
    """Test JWT verification dependency."""

    async def test_valid_token(self) -> None:
        """Should return the user id and store it on the request."""
        user_id = uuid4()
        token = create_access_token(user_id=str(user_id))
        mock_request = MagicMock()
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        result = await verify_jwt(mock_request, credentials)

        assert result == user_id
        assert isinstance(result, UUID)
        assert mock_request.state.user_id == user_id

    async def test_missing_token(self) -> None:
        """Should raise 401 for missing token."""
        with pytest.raises(HTTPException) as exc_info:
            await verify_jwt(MagicMock(), None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    async def test_invalid_token(self) -> None:
        """Should raise 401 for invalid token."""
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials="invalid.token.here"
        )

        with pytest.raises(HTTPException) as exc_info:
            await verify_jwt(MagicMock(), credentials)

        assert exc_info.value.status_code == 401

    async def test_expired_token(self) -> None:
        """Should raise 401 for an expired token."""
        token = create_access_token(user_id=str(uuid4()), expires_in=timedelta(seconds=-5))
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        with pytest.raises(HTTPException) as exc_info:
            await verify_jwt(MagicMock(), credentials)

        assert exc_info.value.status_code == 401
        assert "expired" in exc_info.value.detail

    async def test_subject_not_a_uuid(self) -> None:
        """Should raise 401 when the subject is not a user id."""
        token = create_access_token(user_id="user-123")
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        with pytest.raises(HTTPException) as exc_info:
            await verify_jwt(MagicMock(), credentials)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token subject"
