"""
Ingestion pipeline: classify -> save attachment -> insert record.

Each message is handled on its own; dispatch() schedules the work as a task
and at most `max_concurrency` messages are processed at once. Failures never
reach the event source:
- attachment failure: record is stored with media_path = None;
- insert failure: logged, message is not archived (no retry).
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from telegram_archive.archive_store import ArchiveStore
from telegram_archive.attachment_store import AttachmentStore
from telegram_archive.classifier import classify
from telegram_archive.errors import AttachmentError
from telegram_archive.events import IncomingMessage, MessagingClient
from telegram_archive.models import ArchivedMessage


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IngestionPipeline:
    """Archives incoming messages into an ArchiveStore."""

    def __init__(
        self,
        client: MessagingClient,
        archive: ArchiveStore,
        attachments: AttachmentStore,
        max_concurrency: int = 16,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._client = client
        self._archive = archive
        self._attachments = attachments
        self._clock = clock
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: set[asyncio.Task] = set()

    async def ingest(self, message: IncomingMessage) -> ArchivedMessage | None:
        """
        Archive one message. Returns the inserted record, or None when the
        message was skipped or the insert failed.
        """
        normalized = await classify(message, self._client)
        if normalized is None:
            return None

        media_path = None
        if normalized.attachment is not None:
            try:
                media_path = await self._attachments.save(normalized.message_id, normalized.attachment)
            except AttachmentError as exc:
                logger.warning(f"Error saving media: {exc}")

        record = ArchivedMessage(
            message_id=normalized.message_id,
            date=normalized.date,
            text=normalized.text,
            sender_id=normalized.sender_id,
            sender_username=normalized.sender_username,
            chat_id=normalized.chat_id,
            chat_name=normalized.chat_name,
            media_path=media_path,
            kind=normalized.kind,
            saved_at=self._clock(),
        )
        try:
            await self._archive.insert(record)
        except Exception:
            logger.exception(f"Failed to archive message {record.message_id} from chat {record.chat_id}")
            return None
        logger.debug(f"Archived message {record.message_id} from {record.sender_username or record.sender_id}")
        return record

    async def _ingest_bounded(self, message: IncomingMessage) -> None:
        async with self._semaphore:
            try:
                await self.ingest(message)
            except Exception:
                # the event source never observes ingest failures
                logger.exception(f"Unexpected error while ingesting message {message.message_id}")

    def dispatch(self, message: IncomingMessage) -> asyncio.Task:
        """Schedule ingest(message) without waiting for it."""
        task = asyncio.create_task(self._ingest_bounded(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every dispatched message to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
