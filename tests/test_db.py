"""Module tests: telegram_archive.db (URL handling, schema creation on SQLite)."""

import pytest
from sqlalchemy import inspect

from telegram_archive import db
from telegram_archive.db import dispose_engine, get_engine, get_session_factory, init_db, set_database_url


@pytest.fixture
async def fresh_db(tmp_path):
    set_database_url(f"sqlite+aiosqlite:///{tmp_path / 'archive.db'}")
    yield
    await dispose_engine()
    db._default_url = None


def test_get_engine_without_url_raises():
    db._default_url = None
    with pytest.raises(RuntimeError):
        get_session_factory()


@pytest.mark.asyncio
async def test_set_database_url_and_get_engine(fresh_db):
    engine = get_engine()
    assert engine is not None
    assert hasattr(engine, "connect")
    assert get_engine() is engine


@pytest.mark.asyncio
async def test_init_db_creates_messages_table(fresh_db):
    await init_db()
    async with get_engine().connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    assert "messages" in tables


@pytest.mark.asyncio
async def test_dispose_engine_resets_factory(fresh_db):
    first = get_session_factory()
    await dispose_engine()
    assert get_session_factory() is not first
