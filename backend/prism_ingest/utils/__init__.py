"""
Utility functions - Pure functions with no dependencies.
These can be used across all layers.
"""
from .filename_metadata import parse_filename_metadata
from .ignore_rules import should_ignore
from .validators import sanitize_filename, validate_watch_folder

__all__ = [
    "parse_filename_metadata",
    "should_ignore",
    "sanitize_filename",
    "validate_watch_folder",
]
