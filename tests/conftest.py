"""Shared fixtures: a scripted messaging client and message builders."""

from datetime import datetime, timezone

import pytest

from telegram_archive.events import AttachmentRef, IncomingMessage, Peer


class FakeClient:
    """MessagingClient stand-in; every call is recorded, failures are opt-in."""

    def __init__(
        self,
        sender: Peer | None = Peer(id=101, name="alice"),
        chat: Peer | None = Peer(id=-1001, name="Family"),
        payload: bytes = b"payload",
    ) -> None:
        self.sender = sender
        self.chat = chat
        self.payload = payload
        self.sender_error: Exception | None = None
        self.chat_error: Exception | None = None
        self.download_error: Exception | None = None
        self.downloads: list[AttachmentRef] = []

    async def get_sender(self, message: IncomingMessage) -> Peer | None:
        if self.sender_error:
            raise self.sender_error
        return self.sender

    async def get_chat(self, message: IncomingMessage) -> Peer | None:
        if self.chat_error:
            raise self.chat_error
        return self.chat

    async def download_attachment(self, ref: AttachmentRef) -> bytes:
        self.downloads.append(ref)
        if self.download_error:
            raise self.download_error
        return self.payload


def make_message(message_id: int = 1, text: str | None = "hello", attachment: AttachmentRef | None = None):
    return IncomingMessage(
        message_id=message_id,
        date=datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
        text=text,
        attachment=attachment,
    )


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()
