"""
Archived message record and its table.

- ArchivedMessage: immutable record handed between pipeline, stores and sweeper.
- ArchivedMessageRow: SQLAlchemy mapping of the `messages` table.
- saved_at is the retention clock; it is indexed because every sweep filters on it.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from telegram_archive.base import Base


def _utc_now() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class MessageKind(str, enum.Enum):
    TEXT = "text"
    MEDIA = "media"


@dataclass(frozen=True)
class ArchivedMessage:
    """One archived message. Never updated after insertion; only deleted."""

    message_id: int
    date: datetime
    kind: MessageKind
    saved_at: datetime
    text: str | None = None
    sender_id: int | None = None
    sender_username: str | None = None
    chat_id: int | None = None
    chat_name: str | None = None
    media_path: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)


class ArchivedMessageRow(Base):
    """Persisted form of ArchivedMessage."""

    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    message_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    sender_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    sender_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    chat_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    chat_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    media_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)  # text, media
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)

    __table_args__ = (Index("ix_messages_saved_at", "saved_at"),)

    @classmethod
    def from_record(cls, record: ArchivedMessage) -> "ArchivedMessageRow":
        return cls(
            id=record.id,
            message_id=record.message_id,
            date=record.date,
            text=record.text,
            sender_id=record.sender_id,
            sender_username=record.sender_username,
            chat_id=record.chat_id,
            chat_name=record.chat_name,
            media_path=record.media_path,
            kind=record.kind.value,
            saved_at=record.saved_at,
        )

    def to_record(self) -> ArchivedMessage:
        return ArchivedMessage(
            id=self.id,
            message_id=self.message_id,
            date=_as_utc(self.date),
            text=self.text,
            sender_id=self.sender_id,
            sender_username=self.sender_username,
            chat_id=self.chat_id,
            chat_name=self.chat_name,
            media_path=self.media_path,
            kind=MessageKind(self.kind),
            saved_at=_as_utc(self.saved_at),
        )

    def __repr__(self) -> str:
        return f"<ArchivedMessageRow id={self.id} message_id={self.message_id} kind={self.kind}>"
