"""
Email Decomposer - Extracts structured content from .eml files.

Parses RFC 5322 messages and returns:
- Metadata: from, to, cc, subject, date, message id, in-reply-to
- Body: plain text (preferred) or stripped HTML
- Attachments: retained parts with filename, content type, size and bytes

The body becomes one record; each retained attachment becomes its own
record linked to the email through its context string.
"""
import email
import email.policy
from datetime import datetime, timezone
from email.errors import HeaderParseError
from email.message import EmailMessage
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import List, Optional

from .html_stripper import html_to_text
from ...core.config import INLINE_ATTACHMENT_MIN_BYTES
from ...core.exceptions import EmailParseError
from ...core.logging_config import get_logger
from ...domain.entities import EmailAttachment, EmailDecomposition
from ...domain.value_objects import FilePath

logger = get_logger(__name__)

UNKNOWN_SENDER = "Unknown Sender"
NO_SUBJECT = "(No Subject)"


def _header(msg: EmailMessage, name: str) -> str:
    value = msg.get(name)
    return str(value).strip() if value is not None else ""


def _optional_header(msg: EmailMessage, name: str) -> Optional[str]:
    """Header value, or its raw text when the structured parser rejects it."""
    try:
        return _header(msg, name) or None
    except (IndexError, HeaderParseError, ValueError) as e:
        logger.debug(f"Malformed {name} header, keeping raw value: {e}")
    for key, value in msg.raw_items():
        if key.lower() == name:
            return str(value).strip() or None
    return None


def _address_list(msg: EmailMessage, name: str) -> List[str]:
    return [part.strip() for part in _header(msg, name).split(",") if part.strip()]


def _message_date(msg: EmailMessage) -> Optional[datetime]:
    raw = msg.get("date")
    if raw is None:
        return None
    try:
        parsed = parsedate_to_datetime(str(raw))
    except (TypeError, ValueError, IndexError):
        logger.debug(f"Unparseable Date header: {raw!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _part_text(part) -> str:
    try:
        content = part.get_content()
    except (LookupError, UnicodeDecodeError):
        payload = part.get_payload(decode=True) or b""
        content = payload.decode("utf-8", errors="replace")
    return content if isinstance(content, str) else ""


def _body_text(msg: EmailMessage) -> str:
    """Plain-text part if there is one, otherwise the HTML part stripped."""
    plain = msg.get_body(preferencelist=("plain",))
    if plain is not None:
        text = _part_text(plain).strip()
        if text:
            return text
    html = msg.get_body(preferencelist=("html",))
    if html is not None:
        return html_to_text(_part_text(html))
    return ""


def _attachments(msg: EmailMessage, inline_min_bytes: int) -> List[EmailAttachment]:
    body_parts = {
        id(part)
        for part in (msg.get_body(preferencelist=("plain",)), msg.get_body(preferencelist=("html",)))
        if part is not None
    }
    retained: List[EmailAttachment] = []
    for part in msg.walk():
        if part.is_multipart() or id(part) in body_parts:
            continue
        filename = part.get_filename()
        disposition = part.get_content_disposition()
        if disposition is None and not filename:
            continue
        content = part.get_payload(decode=True) or b""
        size = len(content)
        # Signature logos and tracking pixels
        if disposition == "inline" and size < inline_min_bytes:
            logger.debug(f"Skipping small inline part {filename or '(unnamed)'} ({size} bytes)")
            continue
        if not filename:
            logger.debug(f"Skipping attachment without filename ({part.get_content_type()})")
            continue
        retained.append(EmailAttachment(
            filename=filename,
            content_type=part.get_content_type(),
            size=size,
            content=content,
        ))
    return retained


def build_header_block(
    sender: str,
    to: List[str],
    cc: List[str],
    subject: str,
    date: Optional[datetime],
) -> str:
    """Provenance header prepended to the email body."""
    lines = [
        f"From: {sender}",
        f"To: {', '.join(to)}",
        f"CC: {', '.join(cc)}" if cc else None,
        f"Subject: {subject}",
        f"Date: {date.isoformat() if date else 'Unknown'}",
        "---",
        "",
    ]
    return "\n".join(line for line in lines if line is not None)


def parse_email(filepath: Path, inline_min_bytes: int = INLINE_ATTACHMENT_MIN_BYTES) -> EmailDecomposition:
    """
    Parse a .eml file into an EmailDecomposition.
    
    Args:
        filepath: Path to the .eml file
        inline_min_bytes: Inline parts smaller than this are dropped
    
    Returns:
        EmailDecomposition with header block, body and retained attachments
    
    Raises:
        EmailParseError: If the file cannot be read or parsed
    """
    filepath = Path(filepath)
    try:
        raw = filepath.read_bytes()
    except OSError as e:
        raise EmailParseError(f"Could not read email {filepath.name}: {e}", filepath=str(filepath)) from e
    
    try:
        msg = email.message_from_bytes(raw, policy=email.policy.default)
        sender = _header(msg, "from") or UNKNOWN_SENDER
        to = _address_list(msg, "to")
        cc = _address_list(msg, "cc")
        subject = _header(msg, "subject") or NO_SUBJECT
        date = _message_date(msg)
        body_text = _body_text(msg)
        attachments = _attachments(msg, inline_min_bytes)
        message_id = _optional_header(msg, "message-id")
        in_reply_to = _optional_header(msg, "in-reply-to")
    except Exception as e:
        raise EmailParseError(f"Email parsing failed for {filepath.name}: {e}", filepath=str(filepath)) from e
    
    header_block = build_header_block(sender, to, cc, subject, date)
    
    logger.debug(f"Parsed email {filepath.name}: subject={subject!r}, {len(attachments)} attachment(s)")
    return EmailDecomposition(
        filepath=FilePath(str(filepath)),
        filename=filepath.name,
        subject=subject,
        sender=sender,
        to=to,
        cc=cc,
        date=date,
        message_id=message_id,
        in_reply_to=in_reply_to,
        body_text=body_text,
        full_content=header_block + body_text,
        attachments=attachments,
    )
