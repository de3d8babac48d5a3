"""
Retention sweeper: removes records (and their attachment files) whose
saved_at is older than the retention window.

One sweep:
1. cutoff = now - retention_days
2. for each record with saved_at < cutoff: delete its file if it still exists
   (failures are logged and skipped)
3. one bulk delete of all records with saved_at < cutoff

File and record deletion are not transactional. A file that is already gone is
skipped, so a sweep interrupted between steps 2 and 3 is finished by the next one.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from loguru import logger

from telegram_archive.archive_store import DEFAULT_BATCH_SIZE, ArchiveStore
from telegram_archive.attachment_store import AttachmentBackend


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SweepResult:
    cutoff: datetime
    files_deleted: int = 0
    file_errors: int = 0
    records_deleted: int = 0


class RetentionSweeper:
    """Deletes expired archive records and their attachments."""

    def __init__(
        self,
        archive: ArchiveStore,
        backend: AttachmentBackend,
        retention_days: int = 7,
        interval: timedelta = timedelta(hours=24),
        batch_size: int = DEFAULT_BATCH_SIZE,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._archive = archive
        self._backend = backend
        self.retention_days = retention_days
        self.interval = interval
        self._batch_size = batch_size
        self._clock = clock

    def cutoff(self, retention_days: int | None = None) -> datetime:
        days = self.retention_days if retention_days is None else retention_days
        return self._clock() - timedelta(days=days)

    async def _delete_file(self, path: str) -> bool:
        if not await asyncio.to_thread(self._backend.exists, path):
            return False
        await asyncio.to_thread(self._backend.delete, path)
        return True

    async def sweep(self, retention_days: int | None = None) -> SweepResult:
        """
        Run one sweep. Raises if the bulk record delete fails; file deletion
        errors are counted in the result instead.
        """
        result = SweepResult(cutoff=self.cutoff(retention_days))
        logger.info(f"Sweeping records saved before {result.cutoff.isoformat()}")

        async for record in self._archive.iter_expired(result.cutoff, self._batch_size):
            if not record.media_path:
                continue
            try:
                if await self._delete_file(record.media_path):
                    result.files_deleted += 1
            except Exception as exc:
                result.file_errors += 1
                logger.warning(f"Could not delete file {record.media_path}: {exc}")

        result.records_deleted = await self._archive.delete_expired(result.cutoff)
        logger.info(
            f"Sweep done: {result.records_deleted} records, {result.files_deleted} files removed"
            + (f", {result.file_errors} file errors" if result.file_errors else "")
        )
        return result

    async def run_forever(self) -> None:
        """Sweep now, then once per interval. A failed sweep is retried at the next interval."""
        logger.info(f"Retention sweeper started: {self.retention_days} days, every {self.interval}")
        while True:
            try:
                await self.sweep()
            except Exception:
                logger.exception("Retention sweep failed")
            await asyncio.sleep(self.interval.total_seconds())
