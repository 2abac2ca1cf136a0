"""
Per-user key/value configuration store.

Values are JSON-encoded so booleans and strings round-trip with their type.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.time_utils import utc_now


class UserConfig(SQLModel, table=True):
    """
    One configuration entry owned by one user.

    Fields:
        user_id: Identity of the owning user (opaque string from the auth layer)
        key: Namespaced key, e.g. "chevereto.domain"
        value: JSON-encoded value
        updated_at: Last write time
    """
    __tablename__ = "user_config"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: str = Field(
        sa_column=Column(Text, nullable=False, index=True),
    )

    key: str = Field(
        sa_column=Column(String(255), nullable=False),
    )

    value: str = Field(
        sa_column=Column(Text, nullable=False),
        description="JSON-encoded value"
    )

    updated_at: datetime = Field(default_factory=utc_now)

    __table_args__ = (
        # One value per key per user
        UniqueConstraint("user_id", "key", name="uq_user_config_key"),
    )
