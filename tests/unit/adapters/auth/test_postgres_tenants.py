"""Tests for PostgreSQL tenant repository."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import asyncpg
import pytest

from tenantry.adapters.auth.postgres import PostgresTenantRepository
from tenantry.core.auth.repository import TenantRepository
from tenantry.core.auth.types import TenantRole
from tenantry.core.exceptions import AlreadyMember


def tenant_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": uuid4(),
        "name": "Acme",
        "description": None,
        "plan": "free",
        "status": "active",
        "owner_id": uuid4(),
        "settings": {},
        "created_at": datetime.now(UTC),
        "updated_at": None,
    }
    row.update(overrides)
    return row


class TestPostgresTenantRepository:
    """Test PostgresTenantRepository implementation."""

    @pytest.fixture
    def conn(self) -> MagicMock:
        """Create mock connection used inside transactions."""
        conn = MagicMock()
        conn.execute = AsyncMock(return_value="UPDATE 1")
        conn.fetchrow = AsyncMock(return_value=None)
        conn.fetchval = AsyncMock(return_value=None)
        return conn

    @pytest.fixture
    def mock_db(self, conn: MagicMock) -> MagicMock:
        """Create mock database whose transactions yield conn."""
        db = MagicMock()

        @asynccontextmanager
        async def transaction() -> AsyncIterator[MagicMock]:
            yield conn

        db.transaction = transaction
        return db

    @pytest.fixture
    def repo(self, mock_db: MagicMock) -> PostgresTenantRepository:
        """Create repository with mock database."""
        return PostgresTenantRepository(mock_db)

    def test_implements_protocol(self, repo: PostgresTenantRepository) -> None:
        """Repository should implement TenantRepository protocol."""
        assert isinstance(repo, TenantRepository)

    async def test_find_user_by_email(
        self, repo: PostgresTenantRepository, mock_db: MagicMock
    ) -> None:
        """Should look users up case-insensitively."""
        user_id = uuid4()
        mock_db.fetch_one = AsyncMock(
            return_value={
                "id": user_id,
                "email": "test@example.com",
                "name": "Test User",
                "is_active": True,
                "created_at": datetime.now(UTC),
            }
        )

        result = await repo.find_user_by_email("Test@Example.com")

        assert result is not None
        assert result.id == user_id
        query = mock_db.fetch_one.call_args.args[0]
        assert "lower(email) = lower($1)" in query

    async def test_get_tenant_decodes_json_settings(
        self, repo: PostgresTenantRepository, mock_db: MagicMock
    ) -> None:
        """Settings stored as JSON text are decoded."""
        mock_db.fetch_one = AsyncMock(return_value=tenant_row(settings='{"locale": "en"}'))

        tenant = await repo.get_tenant(uuid4())

        assert tenant is not None
        assert tenant.settings == {"locale": "en"}

    async def test_create_tenant_with_owner(
        self, repo: PostgresTenantRepository, conn: MagicMock
    ) -> None:
        """Should lock the owner, clear their current flag, then add a current owner."""
        owner_id = uuid4()
        row = tenant_row(owner_id=owner_id)
        conn.fetchrow = AsyncMock(return_value=row)

        tenant = await repo.create_tenant_with_owner(owner_id, "Acme")

        assert tenant.id == row["id"]
        statements = [c.args[0] for c in conn.execute.call_args_list]
        assert "FOR UPDATE" in statements[0]
        assert "is_current = false" in statements[1]
        assert "INSERT INTO tenant_memberships" in statements[2]
        assert conn.execute.call_args_list[2].args[1:] == (
            row["id"],
            owner_id,
            TenantRole.OWNER.value,
        )

    async def test_update_tenant_without_changes(
        self, repo: PostgresTenantRepository, mock_db: MagicMock
    ) -> None:
        """Should just read the tenant when nothing changes."""
        mock_db.fetch_one = AsyncMock(return_value=tenant_row())

        await repo.update_tenant(uuid4())

        assert mock_db.fetch_one.call_args.args[0].strip().startswith("SELECT")

    async def test_update_tenant_builds_query(
        self, repo: PostgresTenantRepository, mock_db: MagicMock
    ) -> None:
        """Should number parameters in the order fields are given."""
        tenant_id = uuid4()
        mock_db.fetch_one = AsyncMock(return_value=tenant_row(id=tenant_id, name="New"))

        tenant = await repo.update_tenant(tenant_id, name="New", settings={"a": 1})

        assert tenant is not None
        query, *params = mock_db.fetch_one.call_args.args
        assert "name = $1" in query
        assert "settings = $2" in query
        assert "WHERE id = $4" in query
        assert params[0] == "New"
        assert params[1] == '{"a": 1}'
        assert params[-1] == tenant_id

    @pytest.mark.parametrize("status,expected", [("DELETE 1", True), ("DELETE 0", False)])
    async def test_delete_tenant(
        self, repo: PostgresTenantRepository, conn: MagicMock, status: str, expected: bool
    ) -> None:
        """Should report whether a row was deleted."""
        conn.execute = AsyncMock(return_value=status)

        assert await repo.delete_tenant(uuid4()) is expected

    async def test_list_user_tenants(
        self, repo: PostgresTenantRepository, mock_db: MagicMock
    ) -> None:
        """Should pair tenants with the membership's own timestamp."""
        user_id = uuid4()
        joined_at = datetime(2024, 1, 1, tzinfo=UTC)
        row = tenant_row()
        row.update(
            {
                "tenant_id": row["id"],
                "user_id": user_id,
                "role": "editor",
                "is_current": True,
                "invited_by": None,
                "membership_created_at": joined_at,
            }
        )
        mock_db.fetch_all = AsyncMock(return_value=[row])

        pairs = await repo.list_user_tenants(user_id)

        tenant, membership = pairs[0]
        assert tenant.id == row["id"]
        assert membership.role == TenantRole.EDITOR
        assert membership.is_current is True
        assert membership.created_at == joined_at

    async def test_set_current_tenant_requires_membership(
        self, repo: PostgresTenantRepository, conn: MagicMock
    ) -> None:
        """Should return False and leave flags alone for non-members."""
        conn.fetchval = AsyncMock(return_value=None)

        assert await repo.set_current_tenant(uuid4(), uuid4()) is False
        assert conn.execute.await_count == 1  # the row lock only

    async def test_set_current_tenant(
        self, repo: PostgresTenantRepository, conn: MagicMock
    ) -> None:
        """Should clear other current flags before setting the target."""
        conn.fetchval = AsyncMock(return_value=1)

        assert await repo.set_current_tenant(uuid4(), uuid4()) is True

        statements = [c.args[0] for c in conn.execute.call_args_list]
        assert "FOR UPDATE" in statements[0]
        assert "is_current = false" in statements[1]
        assert "is_current = true" in statements[2]

    async def test_add_member_duplicate(
        self, repo: PostgresTenantRepository, mock_db: MagicMock
    ) -> None:
        """Should map unique violations to AlreadyMember."""
        mock_db.execute_returning = AsyncMock(
            side_effect=asyncpg.UniqueViolationError("duplicate key")
        )

        with pytest.raises(AlreadyMember):
            await repo.add_member(uuid4(), uuid4(), TenantRole.NORMAL)

    async def test_remove_member(self, repo: PostgresTenantRepository, mock_db: MagicMock) -> None:
        """Should report whether a membership was deleted."""
        mock_db.execute = AsyncMock(return_value="DELETE 1")

        assert await repo.remove_member(uuid4(), uuid4()) is True

    async def test_list_members(self, repo: PostgresTenantRepository, mock_db: MagicMock) -> None:
        """Should join account details onto memberships."""
        mock_db.fetch_all = AsyncMock(
            return_value=[
                {
                    "user_id": uuid4(),
                    "email": "a@example.com",
                    "name": "A",
                    "role": "owner",
                    "invited_by": None,
                    "created_at": datetime.now(UTC),
                }
            ]
        )

        members = await repo.list_members(uuid4())

        assert members[0].email == "a@example.com"
        assert members[0].role == TenantRole.OWNER
