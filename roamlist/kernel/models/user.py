"""
Principal model: an authenticated user bound to an external identity.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import Base, TimestampMixin, generate_uuid


class UserRole(str, Enum):
    """Account tiers."""
    FREE = "free"
    PRO = "pro"
    MODERATOR = "moderator"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    """
    User account, created the first time an identity token for a new
    subject is resolved. ``auth_subject`` never changes afterwards.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    auth_subject: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
    )
    display_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    avatar_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
    )
    role: Mapped[UserRole] = mapped_column(
        String(50),
        default=UserRole.FREE,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.auth_subject}>"
