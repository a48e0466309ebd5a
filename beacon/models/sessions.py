"""Authenticated login sessions.

The table belongs to the authentication service, which creates, refreshes
and deletes rows.  This service reads it to resolve the caller and records
the latest device metadata (user agent, IP) on the caller's own row.
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP
from sqlmodel import Column, Field, SQLModel

USER_AGENT_MAX_LENGTH = 255
IP_ADDRESS_MAX_LENGTH = 45  # longest IPv6 literal (IPv4-mapped)


class Session(SQLModel, table=True):
    __tablename__ = "session"  # type: ignore

    id: str = Field(primary_key=True)
    token: str = Field(unique=True, index=True)
    user_id: str = Field(index=True, description="Logical user reference (no FK)")
    user_agent: str | None = Field(default=None, max_length=USER_AGENT_MAX_LENGTH)
    ip_address: str | None = Field(default=None, max_length=IP_ADDRESS_MAX_LENGTH)
    expires_at: datetime = Field(sa_column=Column(TIMESTAMP(timezone=True), nullable=False))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )


class DeviceSessionRead(SQLModel):
    """A session as shown in the caller's device list."""

    id: str
    user_agent: str | None = None
    ip_address: str | None = None
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    current: bool = False
