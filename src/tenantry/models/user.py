"""User model."""
from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from tenantry.models.base import BaseModel


class User(BaseModel):
    """An account. Registration and credentials are managed elsewhere."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(100))
    is_active = Column(Boolean, default=True, nullable=False)

    memberships = relationship(
        "TenantMembership",
        back_populates="user",
        foreign_keys="TenantMembership.user_id",
        cascade="all, delete-orphan",
    )
