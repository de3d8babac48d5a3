"""Module tests: telegram_archive.base."""

from telegram_archive.base import Base


def test_base_is_declarative_base():
    assert Base is not None
    assert hasattr(Base, "metadata")
    assert hasattr(Base.metadata, "tables")


def test_base_metadata_has_messages_table():
    from telegram_archive import models  # noqa: F401
    assert "messages" in Base.metadata.tables
