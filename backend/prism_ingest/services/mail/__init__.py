"""
Email decomposition: parse .eml files and stage their attachments.
"""
from .email_parser import parse_email, build_header_block
from .attachment_stager import stage_attachment, stage_attachments, staging_dir_for
from .html_stripper import html_to_text

__all__ = [
    "parse_email",
    "build_header_block",
    "stage_attachment",
    "stage_attachments",
    "staging_dir_for",
    "html_to_text",
]
