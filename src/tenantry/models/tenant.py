"""Tenant and membership models."""
from sqlalchemy import Boolean, Column, ForeignKey, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from tenantry.models.base import BaseModel


class Tenant(BaseModel):
    """A workspace. Everything else in the schema is scoped to one."""

    __tablename__ = "tenants"

    name = Column(String(50), nullable=False)
    description = Column(String(200))
    plan = Column(String(50), default="free", nullable=False)
    status = Column(String(50), default="active", nullable=False)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    settings = Column(JSONB, default=dict)

    # Relationships
    memberships = relationship(
        "TenantMembership", back_populates="tenant", cascade="all, delete-orphan"
    )
    credentials = relationship(
        "ProviderCredential", back_populates="tenant", cascade="all, delete-orphan"
    )
    models = relationship("TenantModel", back_populates="tenant", cascade="all, delete-orphan")
    model_settings = relationship(
        "TenantModelSetting", back_populates="tenant", cascade="all, delete-orphan"
    )


class TenantMembership(BaseModel):
    """A user's role in a tenant and whether it is their current tenant."""

    __tablename__ = "tenant_memberships"

    tenant_id = Column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role = Column(String(20), nullable=False)  # owner, admin, editor, normal
    is_current = Column(Boolean, default=False, server_default=text("false"), nullable=False)
    invited_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))

    tenant = relationship("Tenant", back_populates="memberships")
    user = relationship("User", back_populates="memberships", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id"),
        # At most one current membership per user
        Index(
            "uq_tenant_memberships_current_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_current"),
        ),
        # At most one owner per tenant
        Index(
            "uq_tenant_memberships_owner",
            "tenant_id",
            unique=True,
            postgresql_where=text("role = 'owner'"),
        ),
    )
