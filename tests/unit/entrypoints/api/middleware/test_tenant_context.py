"""Tests for tenant context dependencies."""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from fastapi import HTTPException

from tenantry.adapters.db.memory import InMemoryStore
from tenantry.core.auth.context import AuthorizationPipeline
from tenantry.core.auth.types import Tenant, TenantRole, User
from tenantry.core.exceptions import InsufficientRole
from tenantry.entrypoints.api.middleware.tenant_context import (
    TENANT_HEADER,
    require_tenant_role,
    requested_tenant_id,
)


def make_request(path_tenant: str | None = None, header_tenant: str | None = None) -> MagicMock:
    """Return a mock request carrying a tenant id in the path and/or header."""
    request = MagicMock()
    request.path_params = {"tenant_id": path_tenant} if path_tenant else {}
    request.headers = {TENANT_HEADER: header_tenant} if header_tenant else {}
    return request


class TestRequestedTenantId:
    """Tests for reading the tenant id off a request."""

    def test_none(self) -> None:
        """No path parameter and no header means no explicit tenant."""
        assert requested_tenant_id(make_request()) is None

    def test_path_wins_over_header(self) -> None:
        """The path parameter takes precedence over the header."""
        path_id, header_id = uuid4(), uuid4()

        result = requested_tenant_id(make_request(str(path_id), str(header_id)))

        assert result == path_id

    def test_header(self) -> None:
        """The header is used when the path has no tenant."""
        header_id = uuid4()

        assert requested_tenant_id(make_request(header_tenant=str(header_id))) == header_id

    def test_invalid(self) -> None:
        """A malformed id is a 400."""
        with pytest.raises(HTTPException) as exc_info:
            requested_tenant_id(make_request(header_tenant="acme"))

        assert exc_info.value.status_code == 400


class TestRequireTenantRole:
    """Tests for the role-requiring dependency."""

    async def test_sets_context_on_request(
        self, pipeline: AuthorizationPipeline, owner: User, tenant: Tenant
    ) -> None:
        """The resolved context is returned and stored on the request."""
        request = make_request()
        checker = require_tenant_role(TenantRole.ADMIN)

        context = await checker(request, owner.id, pipeline)

        assert context.tenant_id == tenant.id
        assert context.role == TenantRole.OWNER
        assert request.state.tenant_context == context

    async def test_blocks_insufficient_role(
        self,
        pipeline: AuthorizationPipeline,
        store: InMemoryStore,
        member: User,
        tenant: Tenant,
    ) -> None:
        """A member below the minimum role is rejected."""
        await store.add_member(tenant.id, member.id, TenantRole.EDITOR)
        checker = require_tenant_role(TenantRole.ADMIN)

        with pytest.raises(InsufficientRole):
            await checker(make_request(header_tenant=str(tenant.id)), member.id, pipeline)
