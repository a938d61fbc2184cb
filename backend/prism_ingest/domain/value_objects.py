"""
Value Objects - Immutable objects that represent domain concepts.
These have no identity and are compared by value.
"""
from typing import NewType

FilePath = NewType("FilePath", str)
RecordId = NewType("RecordId", str)

# Extensions the watcher hands to the pipeline
SUPPORTED_EXTENSIONS = frozenset({".txt", ".md", ".json", ".srt", ".pdf", ".docx", ".eml"})

# Extensions an email attachment may have to be expanded into its own record
ATTACHMENT_EXTENSIONS = frozenset({".pdf", ".docx", ".txt", ".md", ".csv"})

# Folder roles owned by the watcher manager
ROLE_TRANSCRIPTS = "transcripts"
ROLE_EMAIL = "email"
