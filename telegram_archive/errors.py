"""Exceptions raised inside the archiver."""


class ArchiveError(Exception):
    """Base class for archiver errors."""


class AttachmentError(ArchiveError):
    """Attachment could not be downloaded or written."""

    def __init__(self, message_id: int, reason: str):
        super().__init__(f"attachment of message {message_id}: {reason}")
        self.message_id = message_id
        self.reason = reason
