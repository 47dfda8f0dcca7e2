# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from authkeeper.infrastructure.db.session import Base

EMAIL_INDEX = "uq_users_email"
USERNAME_INDEX = "uq_users_username"


class UserRow(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index(EMAIL_INDEX, "email", unique=True),
        Index(USERNAME_INDEX, "username", unique=True),
    )
    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    username: Mapped[str] = mapped_column(String(30), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
