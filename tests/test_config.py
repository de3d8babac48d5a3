"""Tests for ArchiveSettings (environment loading and validation)."""

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from telegram_archive.config import ArchiveSettings


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch, tmp_path):
    # Keep a developer's .env out of the tests.
    monkeypatch.chdir(tmp_path)


def test_defaults(monkeypatch):
    monkeypatch.delenv("RETENTION_DAYS", raising=False)
    settings = ArchiveSettings()
    assert settings.retention_days == 7
    assert settings.retention_window == timedelta(days=7)
    assert settings.sweep_interval == timedelta(hours=24)
    assert settings.media_dir == Path("./media")
    assert settings.attachment_backend == "local"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("RETENTION_DAYS", "30")
    monkeypatch.setenv("MEDIA_DIR", "/srv/media")
    monkeypatch.setenv("MAX_CONCURRENT_INGESTIONS", "4")
    settings = ArchiveSettings()
    assert settings.retention_days == 30
    assert settings.media_dir == Path("/srv/media")
    assert settings.max_concurrent_ingestions == 4


def test_reads_dotenv_file(monkeypatch, tmp_path):
    monkeypatch.delenv("RETENTION_DAYS", raising=False)
    (tmp_path / ".env").write_text("RETENTION_DAYS=3\nAPI_ID=12345\n")
    settings = ArchiveSettings()
    assert settings.retention_days == 3
    assert settings.api_id == 12345


@pytest.mark.parametrize("value", ["", "0", "-1", "seven"])
def test_invalid_retention_falls_back_to_default(monkeypatch, value):
    monkeypatch.setenv("RETENTION_DAYS", value)
    assert ArchiveSettings().retention_days == 7


def test_blank_retention_in_dotenv_uses_default(monkeypatch, tmp_path):
    monkeypatch.delenv("RETENTION_DAYS", raising=False)
    (tmp_path / ".env").write_text("RETENTION_DAYS=\n")
    assert ArchiveSettings().retention_days == 7


def test_settings_are_frozen():
    settings = ArchiveSettings()
    with pytest.raises(ValidationError):
        settings.retention_days = 1
