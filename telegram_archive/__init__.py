"""
Telegram-Archive: archives incoming Telegram messages and prunes them after a retention window.

Records and storage:
  ArchivedMessage, ArchivedMessageRow, MessageKind, Base
  ArchiveStore, InMemoryArchiveStore, SqlArchiveStore, find_expired
  set_database_url, get_engine, get_session_factory, init_db, session_scope, dispose_engine

Attachments:
  AttachmentStore, LocalDirectoryBackend, S3CompatibleBackend, create_attachment_backend
  resolve_extension, attachment_filename

Pipeline:
  IncomingMessage, AttachmentRef, Peer, MessagingClient
  classify, NormalizedMessage, IngestionPipeline, RetentionSweeper, SweepResult

Run with `python -m telegram_archive` (settings from environment / .env, see ArchiveSettings).
"""

from telegram_archive.archive_store import ArchiveStore, InMemoryArchiveStore, SqlArchiveStore, find_expired
from telegram_archive.attachment_store import (
    AttachmentStore,
    LocalDirectoryBackend,
    S3CompatibleBackend,
    attachment_filename,
    create_attachment_backend,
    resolve_extension,
)
from telegram_archive.base import Base
from telegram_archive.classifier import NormalizedMessage, classify
from telegram_archive.config import ArchiveSettings
from telegram_archive.db import (
    dispose_engine,
    get_engine,
    get_session_factory,
    init_db,
    session_scope,
    set_database_url,
)
from telegram_archive.errors import ArchiveError, AttachmentError
from telegram_archive.events import AttachmentRef, IncomingMessage, MessagingClient, Peer
from telegram_archive.models import ArchivedMessage, ArchivedMessageRow, MessageKind
from telegram_archive.pipeline import IngestionPipeline
from telegram_archive.sweeper import RetentionSweeper, SweepResult

__all__ = [
    "ArchiveError",
    "ArchiveSettings",
    "ArchiveStore",
    "ArchivedMessage",
    "ArchivedMessageRow",
    "AttachmentError",
    "AttachmentRef",
    "AttachmentStore",
    "Base",
    "IncomingMessage",
    "IngestionPipeline",
    "InMemoryArchiveStore",
    "LocalDirectoryBackend",
    "MessageKind",
    "MessagingClient",
    "NormalizedMessage",
    "Peer",
    "RetentionSweeper",
    "S3CompatibleBackend",
    "SqlArchiveStore",
    "SweepResult",
    "attachment_filename",
    "classify",
    "create_attachment_backend",
    "dispose_engine",
    "find_expired",
    "get_engine",
    "get_session_factory",
    "init_db",
    "resolve_extension",
    "session_scope",
    "set_database_url",
]
