"""Local disk storage for task attachments."""

from __future__ import annotations

import re
import shutil
import uuid
from pathlib import Path
from typing import Iterable

from fastapi import UploadFile

from projecthub.core.exceptions import InvalidArgument
from projecthub.core.logging import get_logger
from projecthub.core.settings import settings

logger = get_logger(__name__)

ATTACHMENTS_URL_PREFIX = "/attachments"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def upload_root() -> Path:
    root = Path(settings.upload_dir)
    if not root.is_absolute():
        root = (Path.cwd() / root).resolve()
    return root


def _safe_filename(name: str | None) -> str:
    base = Path(name or "file").name
    cleaned = _UNSAFE_CHARS.sub("-", base).strip("-.") or "file"
    return f"{uuid.uuid4().hex[:12]}-{cleaned}"


def save_upload(task_id: uuid.UUID, upload: UploadFile) -> dict:
    """Write the upload under ``<upload_dir>/<task_id>/`` and return its metadata."""
    target_dir = upload_root() / str(task_id)
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = _safe_filename(upload.filename)
    target = target_dir / filename

    with target.open("wb") as out:
        shutil.copyfileobj(upload.file, out)

    size = target.stat().st_size
    if size > settings.max_attachment_size_bytes:
        target.unlink(missing_ok=True)
        raise InvalidArgument(
            f"File '{upload.filename}' exceeds the maximum size of {settings.max_attachment_size_bytes} bytes"
        )

    return {
        "url": f"{ATTACHMENTS_URL_PREFIX}/{task_id}/{filename}",
        "local_path": str(target),
        "original_name": upload.filename,
        "mimetype": upload.content_type,
        "size": size,
    }


def remove_files(paths: Iterable[str]) -> None:
    """Best-effort removal; a file that is already gone is not an error."""
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("attachment_file_remove_failed", path=path, error=str(exc))
