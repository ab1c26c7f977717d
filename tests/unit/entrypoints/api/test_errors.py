"""Tests for domain error translation."""

import json
from unittest.mock import MagicMock

import pytest

from tenantry.core.auth.types import TenantRole
from tenantry.core.exceptions import (
    DecryptionError,
    InsufficientRole,
    InvalidCredential,
    ModelNotFound,
    NotAMember,
)
from tenantry.entrypoints.api.errors import tenantry_error_handler


class TestTenantryErrorHandler:
    """Tests for tenantry_error_handler."""

    @pytest.fixture
    def request_(self) -> MagicMock:
        """Return a mock request."""
        request = MagicMock()
        request.method = "GET"
        request.url.path = "/api/v1/model-providers/models"
        return request

    async def test_status_and_code(self, request_: MagicMock) -> None:
        """The error's own status and code are used."""
        response = await tenantry_error_handler(request_, ModelNotFound("Model x not found"))

        assert response.status_code == 404
        assert json.loads(response.body) == {
            "detail": "Model x not found",
            "code": "model_not_found",
        }

    async def test_insufficient_role_lists_acceptable_roles(self, request_: MagicMock) -> None:
        """Role denials tell the client which roles would pass."""
        error = InsufficientRole(TenantRole.NORMAL, [TenantRole.ADMIN, TenantRole.OWNER])

        response = await tenantry_error_handler(request_, error)

        body = json.loads(response.body)
        assert response.status_code == 403
        assert body["code"] == "insufficient_role"
        assert body["acceptable_roles"] == ["admin", "owner"]

    async def test_vendor_errors_name_the_vendor(self, request_: MagicMock) -> None:
        """Vendor errors carry the vendor name."""
        response = await tenantry_error_handler(
            request_, InvalidCredential("gemini", "gemini rejected the API key")
        )

        assert response.status_code == 400
        assert json.loads(response.body)["vendor"] == "gemini"

    async def test_default_message(self, request_: MagicMock) -> None:
        """Errors raised without a message still have a detail."""
        response = await tenantry_error_handler(request_, NotAMember())

        assert json.loads(response.body)["detail"] == "You are not a member of this workspace"

    async def test_server_errors(self, request_: MagicMock) -> None:
        """Configuration failures surface as 500."""
        response = await tenantry_error_handler(request_, DecryptionError("bad key"))

        assert response.status_code == 500
