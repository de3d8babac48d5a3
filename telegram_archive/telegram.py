"""
Telethon adapter for the messaging-client boundary.

TelethonClient owns the Telegram connection: login with a string session,
new-message subscription, sender/chat lookups and media downloads.
"""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger
from telethon import TelegramClient, events
from telethon.sessions import StringSession

from telegram_archive.config import ArchiveSettings
from telegram_archive.events import AttachmentRef, IncomingMessage, Peer


def attachment_from_media(media: Any) -> AttachmentRef:
    """Build an AttachmentRef from a Telethon MessageMedia* object."""
    document = getattr(media, "document", None)
    photo = getattr(media, "photo", None)
    attributes = getattr(document, "attributes", None) or []
    return AttachmentRef(
        mime_type=getattr(document, "mime_type", None) or None,
        is_photo=photo is not None,
        file_names=tuple(a.file_name for a in attributes if getattr(a, "file_name", None)),
        handle=media,
    )


def incoming_from_message(message: Any) -> IncomingMessage:
    """Convert a Telethon Message into an IncomingMessage."""
    media = getattr(message, "media", None)
    return IncomingMessage(
        message_id=message.id,
        date=message.date,
        text=message.message or None,
        attachment=attachment_from_media(media) if media else None,
        handle=message,
    )


class TelethonClient:
    """MessagingClient implementation backed by telethon.TelegramClient."""

    def __init__(self, client: TelegramClient):
        self._client = client

    @classmethod
    def from_settings(cls, settings: ArchiveSettings) -> "TelethonClient":
        if settings.api_id is None or not settings.api_hash:
            raise RuntimeError("API_ID and API_HASH must be set to connect to Telegram")
        client = TelegramClient(
            StringSession(settings.session),
            settings.api_id,
            settings.api_hash,
            connection_retries=settings.connection_retries,
        )
        return cls(client)

    async def start(self) -> None:
        """Connect and authorize; prompts on the console when the session is empty."""
        logger.info("Authorizing Telegram client")
        await self._client.start()
        logger.info("Telegram client authorized")

    def on_message(self, callback: Callable[[IncomingMessage], Any]) -> None:
        """Call `callback` with every new message; its return value is ignored."""

        async def _handler(event) -> None:
            callback(incoming_from_message(event.message))

        self._client.add_event_handler(_handler, events.NewMessage())

    async def run_until_disconnected(self) -> None:
        await self._client.run_until_disconnected()

    async def get_sender(self, message: IncomingMessage) -> Peer | None:
        sender = await message.handle.get_sender()
        if sender is None:
            return None
        return Peer(id=sender.id, name=getattr(sender, "username", None))

    async def get_chat(self, message: IncomingMessage) -> Peer | None:
        chat = await message.handle.get_chat()
        if chat is None:
            return None
        return Peer(id=chat.id, name=getattr(chat, "title", None))

    async def download_attachment(self, ref: AttachmentRef) -> bytes:
        data = await self._client.download_media(ref.handle, file=bytes)
        if data is None:
            raise ValueError(f"{type(ref.handle).__name__} has no downloadable content")
        return data
