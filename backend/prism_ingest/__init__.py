"""Watched-folder ingestion of call transcripts, documents and email."""

__version__ = "1.0.0"
