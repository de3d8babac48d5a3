"""
Message classifier: decides whether an incoming message is archived and
normalizes it.

Messages with neither text nor attachment are dropped without side effects.
Sender/chat lookup failures leave the corresponding fields empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable

from loguru import logger

from telegram_archive.events import AttachmentRef, IncomingMessage, MessagingClient, Peer
from telegram_archive.models import MessageKind


@dataclass(frozen=True)
class NormalizedMessage:
    message_id: int
    date: datetime
    text: str | None
    sender_id: int | None
    sender_username: str | None
    chat_id: int | None
    chat_name: str | None
    attachment: AttachmentRef | None

    @property
    def kind(self) -> MessageKind:
        """MEDIA whenever an attachment is referenced, whether or not it downloads."""
        return MessageKind.MEDIA if self.attachment is not None else MessageKind.TEXT


def is_ingestible(message: IncomingMessage) -> bool:
    return bool(message.text) or message.attachment is not None


async def _lookup(
    lookup: Callable[[IncomingMessage], Awaitable[Peer | None]],
    message: IncomingMessage,
    what: str,
) -> Peer | None:
    try:
        return await lookup(message)
    except Exception as exc:
        logger.warning(f"Could not resolve {what} of message {message.message_id}: {exc}")
        return None


async def classify(message: IncomingMessage, client: MessagingClient) -> NormalizedMessage | None:
    """Return the normalized message, or None when there is nothing to archive."""
    if not is_ingestible(message):
        return None
    sender = await _lookup(client.get_sender, message, "sender")
    chat = await _lookup(client.get_chat, message, "chat")
    return NormalizedMessage(
        message_id=message.message_id,
        date=message.date,
        text=message.text or None,
        sender_id=sender.id if sender else None,
        sender_username=sender.name if sender else None,
        chat_id=chat.id if chat else None,
        chat_name=chat.name if chat else None,
        attachment=message.attachment,
    )
