"""
User model for platform accounts
"""

from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship, validates
from typing import Dict, Any
from enum import Enum
import re

from seo_platform.models.base import BaseModel


class UserRole(str, Enum):
    """Legacy account role"""
    USER = "USER"
    ADMIN = "ADMIN"


class PlatformRole(str, Enum):
    """Platform-wide role, independent of workspace membership"""
    USER = "USER"
    SUPERADMIN = "SUPERADMIN"


class User(BaseModel):
    """
    A person who can sign in and belong to workspaces
    """
    __tablename__ = "users"
    __private_fields__ = ("password_hash",)

    email = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Login email address"
    )

    name = Column(String(255), nullable=True)

    image = Column(String(1024), nullable=True, comment="Avatar URL")

    password_hash = Column(
        String(255),
        nullable=True,
        comment="bcrypt hash of the password"
    )

    role = Column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
    )

    platform_role = Column(
        String(20),
        nullable=False,
        default=PlatformRole.USER.value,
        comment="USER or SUPERADMIN"
    )

    has_completed_onboarding = Column(Boolean, nullable=False, default=False)

    # Relationships
    owned_workspaces = relationship("Workspace", back_populates="owner")
    memberships = relationship("WorkspaceUser", back_populates="user", cascade="all, delete-orphan")

    @validates('email')
    def validate_email(self, key: str, email: str) -> str:
        """
        Validate email format
        """
        if not email:
            raise ValueError("Email cannot be empty")

        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, email):
            raise ValueError("Invalid email format")

        return email.lower()

    @validates('platform_role')
    def validate_platform_role(self, key: str, role: str) -> str:
        return PlatformRole(role).value

    @property
    def is_super_admin(self) -> bool:
        return self.platform_role == PlatformRole.SUPERADMIN.value

    def to_public_dict(self) -> Dict[str, Any]:
        """Subset of fields safe to embed in other resources"""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "image": self.image,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<User(email='{self.email}')>"
