"""
Process bootstrap: settings, logging, database, Telegram client, sweeper.

run() wires the components together and blocks until the Telegram client
disconnects; main() is the console entry point.
"""

from __future__ import annotations

import asyncio
import contextlib

from loguru import logger

from telegram_archive.archive_store import SqlArchiveStore
from telegram_archive.attachment_store import AttachmentStore, create_attachment_backend
from telegram_archive.config import ArchiveSettings
from telegram_archive.db import dispose_engine, get_session_factory, init_db, set_database_url
from telegram_archive.log import configure_logging
from telegram_archive.pipeline import IngestionPipeline
from telegram_archive.sweeper import RetentionSweeper
from telegram_archive.telegram import TelethonClient


async def run(settings: ArchiveSettings | None = None) -> None:
    settings = settings or ArchiveSettings()
    configure_logging(settings.log_level)

    if settings.attachment_backend == "local":
        settings.media_dir.mkdir(parents=True, exist_ok=True)

    set_database_url(settings.database_url)
    await init_db()
    archive = SqlArchiveStore(get_session_factory())
    logger.info("Connected to archive database")

    client = TelethonClient.from_settings(settings)
    await client.start()

    backend = create_attachment_backend(settings)
    pipeline = IngestionPipeline(
        client,
        archive,
        AttachmentStore(client, backend),
        max_concurrency=settings.max_concurrent_ingestions,
    )
    sweeper = RetentionSweeper(
        archive,
        backend,
        retention_days=settings.retention_days,
        interval=settings.sweep_interval,
        batch_size=settings.sweep_batch_size,
    )

    sweep_task = asyncio.create_task(sweeper.run_forever())
    client.on_message(pipeline.dispatch)
    logger.info("Telegram client active, archiving started")
    try:
        await client.run_until_disconnected()
    finally:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task
        await pipeline.drain()
        await dispose_engine()


def main() -> None:
    asyncio.run(run())
