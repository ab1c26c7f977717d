"""Vendor credential and model catalog models."""
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from tenantry.models.base import BaseModel

CATEGORY_CHECK = "category IN ('llm', 'embedding', 'rerank', 'tts', 'speech_to_text')"


class ProviderCredential(BaseModel):
    """Encrypted vendor configuration for a tenant."""

    __tablename__ = "provider_credentials"

    tenant_id = Column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    vendor = Column(String(50), nullable=False)

    # Fernet token of the JSON config
    encrypted_config = Column(Text, nullable=False)

    is_valid = Column(Boolean, default=True, server_default=text("true"), nullable=False)
    last_validated_at = Column(DateTime(timezone=True), nullable=True)

    tenant = relationship("Tenant", back_populates="credentials")

    __table_args__ = (UniqueConstraint("tenant_id", "vendor"),)


class TenantModel(BaseModel):
    """One (tenant, vendor, model) catalog entry."""

    __tablename__ = "tenant_models"

    tenant_id = Column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    vendor = Column(String(50), nullable=False)
    model_id = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False)
    source = Column(String(10), nullable=False)  # auto | custom
    enabled = Column(Boolean, default=True, server_default=text("true"), nullable=False)
    retired = Column(Boolean, default=False, server_default=text("false"), nullable=False)

    tenant = relationship("Tenant", back_populates="models")

    __table_args__ = (
        UniqueConstraint("tenant_id", "vendor", "model_id"),
        CheckConstraint(CATEGORY_CHECK, name="category"),
        CheckConstraint("source IN ('auto', 'custom')", name="source"),
        CheckConstraint("source = 'auto' OR NOT retired", name="retired_only_auto"),
    )


class TenantModelSetting(BaseModel):
    """A tenant's default model for one category."""

    __tablename__ = "tenant_model_settings"

    tenant_id = Column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    category = Column(String(20), nullable=False)
    vendor = Column(String(50), nullable=False)
    model_id = Column(String(255), nullable=False)

    tenant = relationship("Tenant", back_populates="model_settings")

    __table_args__ = (
        UniqueConstraint("tenant_id", "category"),
        CheckConstraint(CATEGORY_CHECK, name="category"),
    )
