from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Enum, Text, Uuid
from sqlalchemy.sql import func

from models.base import Base


PROFILE_ROLE = Enum(
    "admin",
    "teacher",
    "student",
    name="profile_role",
)


class Profile(Base):
    """Directory entry for an authenticated user; `id` matches the token `sub`."""

    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    role = Column(PROFILE_ROLE, nullable=False, default="student")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
