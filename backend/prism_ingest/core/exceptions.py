"""
Ingestion exceptions.

Every per-file failure is one of these. They are raised inside a single
file's processing routine and converted to an IngestionResult at the
pipeline boundary, so none of them ever reaches the watcher.
"""
from typing import Optional


class IngestionError(Exception):
    """Base class for ingestion failures tied to one file."""

    def __init__(self, message: str, filepath: Optional[str] = None):
        super().__init__(message)
        self.filepath = filepath


class IgnorableInputError(IngestionError):
    """Unsupported extension or ignore-pattern match."""
    pass


class EmptyContentError(IngestionError):
    """Extraction produced no usable text."""
    pass


class ExtractionError(IngestionError):
    """A format decoder failed (malformed PDF, unreadable DOCX, bad JSON...)."""
    pass


class ExtractionTimeoutError(ExtractionError):
    """Extraction exceeded the configured time bound."""
    pass


class EmailParseError(ExtractionError):
    """The .eml file could not be read or parsed."""
    pass


class DuplicateFilepathError(IngestionError):
    """A record already exists for this filepath."""
    pass


class WatcherFaultError(IngestionError):
    """Filesystem-level watch failure (permission denied, unreadable mount)."""
    pass
