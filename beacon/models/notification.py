from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlalchemy import TIMESTAMP, Index
from sqlmodel import JSON, Column, Field, SQLModel


class NotificationBase(SQLModel):
    user_id: str = Field(index=True, description="Logical user reference (no FK)")
    type: str | None = Field(default=None, max_length=64, description="Categorization tag, e.g. announcement")
    title: str = Field(max_length=255)
    body: str = Field(max_length=4000)
    url: str | None = Field(default=None, max_length=2048, description="Deep link opened on click")
    tag: str | None = Field(default=None, max_length=255, description="Push de-duplication tag")
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    is_read: bool = Field(default=False, index=True)


class Notification(NotificationBase, table=True):
    """A message owed to one user.  Rows are never deleted here; ``is_read`` only goes False → True."""

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )

    __table_args__ = (Index("ix_notification_user_is_read", "user_id", "is_read"),)


class NotificationPayload(SQLModel):
    """What a caller hands to ``NotificationService.dispatch``."""

    title: str = Field(min_length=1, max_length=255)
    body: str = Field(default="", max_length=4000)
    url: str | None = None
    tag: str | None = None
    type: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    icon: str | None = None
    badge: str | None = None


class NotificationRead(BaseModel):
    """API shape of a notification (camelCase, as the browser client expects)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    user_id: str
    type: str | None = None
    title: str
    # Same name as the create request; rows store it as ``body``
    message: str = PydanticField(validation_alias=AliasChoices("message", "body"))
    url: str | None = None
    tag: str | None = None
    data: dict[str, Any] = {}
    is_read: bool
    created_at: datetime
