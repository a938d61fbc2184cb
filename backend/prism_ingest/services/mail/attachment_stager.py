"""
Attachment staging.

Writes retained email attachments into a per-email staging directory next
to the .eml file. Names never collide: a numeric suffix is appended until a
free name is found, so no attachment overwrites another.
"""
from pathlib import Path
from typing import List

from ...core.config import ATTACHMENT_STAGING_DIR
from ...core.logging_config import get_logger
from ...domain.entities import EmailAttachment, StagedAttachment
from ...domain.value_objects import FilePath
from ...utils.validators import sanitize_filename

logger = get_logger(__name__)


def staging_dir_for(email_path: Path, staging_dir_name: str = ATTACHMENT_STAGING_DIR) -> Path:
    """``<email dir>/<staging dir>/<email stem>/``"""
    email_path = Path(email_path)
    return email_path.parent / staging_dir_name / sanitize_filename(email_path.stem, fallback="email")


def free_path(directory: Path, filename: str) -> Path:
    """First ``name``, ``name_1``, ``name_2``... that does not exist yet."""
    candidate = directory / filename
    stem, suffix = Path(filename).stem, Path(filename).suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}{suffix}"
        counter += 1
    return candidate


def stage_attachment(attachment: EmailAttachment, output_dir: Path) -> StagedAttachment:
    """Write one attachment under a collision-free name."""
    output_dir.mkdir(parents=True, exist_ok=True)
    safe_name = sanitize_filename(attachment.filename)
    target = free_path(output_dir, safe_name)
    # "x" mode fails instead of overwriting if another writer claimed the name
    while True:
        try:
            with open(target, "xb") as f:
                f.write(attachment.content)
            break
        except FileExistsError:
            target = free_path(output_dir, safe_name)
    
    logger.debug(f"Staged attachment {attachment.filename} -> {target}")
    return StagedAttachment(
        filename=target.name,
        filepath=FilePath(str(target)),
        content_type=attachment.content_type,
        size=attachment.size,
    )


def stage_attachments(attachments: List[EmailAttachment], output_dir: Path) -> List[StagedAttachment]:
    """Stage every attachment, in order."""
    return [stage_attachment(attachment, output_dir) for attachment in attachments]
