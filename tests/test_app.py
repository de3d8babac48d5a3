"""End-to-end wiring of app.run with a fake Telegram client and a SQLite archive."""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from conftest import FakeClient, make_message
from telegram_archive.app import run
from telegram_archive.config import ArchiveSettings
from telegram_archive.db import dispose_engine, session_scope
from telegram_archive.events import AttachmentRef
from telegram_archive.models import ArchivedMessageRow


@pytest.fixture
async def _release_engine():
    yield
    await dispose_engine()


class ScriptedTelegram(FakeClient):
    """Delivers a fixed list of messages, then disconnects."""

    def __init__(self, messages):
        super().__init__()
        self.messages = messages
        self.callback = None
        self.started = False

    async def start(self):
        self.started = True

    def on_message(self, callback):
        self.callback = callback

    async def run_until_disconnected(self):
        for message in self.messages:
            self.callback(message)


@pytest.mark.asyncio
async def test_run_archives_delivered_messages(tmp_path, _release_engine):
    settings = ArchiveSettings(
        media_dir=tmp_path / "media",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'archive.db'}",
        api_id=1,
        api_hash="hash",
        log_level="WARNING",
    )
    telegram = ScriptedTelegram(
        [
            make_message(message_id=1, text="hello"),
            make_message(message_id=2, text=None, attachment=AttachmentRef(mime_type="image/png")),
            make_message(message_id=3, text=None),
        ]
    )
    counted = {}

    async def count_rows():
        async with session_scope() as session:
            counted["rows"] = await session.scalar(select(func.count()).select_from(ArchivedMessageRow))

    with patch("telegram_archive.app.TelethonClient.from_settings", return_value=telegram), patch(
        "telegram_archive.app.dispose_engine", side_effect=count_rows
    ):
        await run(settings)

    assert telegram.started
    assert counted["rows"] == 2
    saved = list((tmp_path / "media").iterdir())
    assert len(saved) == 1
    assert saved[0].name.endswith("_2.png")


@pytest.mark.asyncio
async def test_run_stops_sweeper_before_disposing_engine(tmp_path, _release_engine):
    settings = ArchiveSettings(
        media_dir=tmp_path / "media",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'archive.db'}",
        api_id=1,
        api_hash="hash",
        log_level="WARNING",
    )
    events = []
    sweeping = asyncio.Event()

    async def slow_run_forever(self):
        sweeping.set()
        try:
            await asyncio.sleep(3600)
        finally:
            events.append("sweeper stopped")

    class DisconnectAfterSweepStarts(ScriptedTelegram):
        async def run_until_disconnected(self):
            await sweeping.wait()

    async def record_dispose():
        events.append("engine disposed")

    with patch("telegram_archive.app.TelethonClient.from_settings", return_value=DisconnectAfterSweepStarts([])), patch(
        "telegram_archive.app.RetentionSweeper.run_forever", slow_run_forever
    ), patch("telegram_archive.app.dispose_engine", side_effect=record_dispose):
        await run(settings)

    assert events == ["sweeper stopped", "engine disposed"]
