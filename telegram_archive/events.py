"""
Messaging-client boundary.

Client adapters turn their native events into IncomingMessage values and
answer sender/chat lookups and attachment downloads through MessagingClient.
`handle` fields carry the adapter's own objects back to it untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol


@dataclass(frozen=True)
class AttachmentRef:
    """Reference to downloadable media attached to a message."""

    mime_type: str | None = None
    is_photo: bool = False
    file_names: tuple[str, ...] = ()
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Peer:
    """Resolved sender or chat. `name` is a username for users and a title for chats."""

    id: int | None
    name: str | None = None


@dataclass(frozen=True)
class IncomingMessage:
    """A new message as delivered by the messaging client."""

    message_id: int
    date: datetime
    text: str | None = None
    attachment: AttachmentRef | None = None
    handle: Any = field(default=None, compare=False, repr=False)


class MessagingClient(Protocol):
    """Lookups and downloads the archiver needs from the messaging client."""

    async def get_sender(self, message: IncomingMessage) -> Peer | None:
        """Resolve who sent the message; None when unknown."""
        ...

    async def get_chat(self, message: IncomingMessage) -> Peer | None:
        """Resolve the chat the message was posted in; None when unknown."""
        ...

    async def download_attachment(self, ref: AttachmentRef) -> bytes:
        """Download the attachment payload."""
        ...
