"""File storage for uploaded images (menu item photos, restaurant logos)."""

from __future__ import annotations

import asyncio
import logging
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from menuboard.core.config import get_settings
from menuboard.core.errors import ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def validate_image(field: str, filename: str | None, content: bytes, max_bytes: int) -> None:
    """Reject unsupported extensions, empty files and oversized files."""
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationFailed.for_field(
            field,
            f"Unsupported file type: {ext or '(none)'}. "
            f"Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}",
        )
    if not content:
        raise ValidationFailed.for_field(field, "No file uploaded")
    if len(content) > max_bytes:
        raise ValidationFailed.for_field(
            field, f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB."
        )


class FileStorage(Protocol):
    async def save(self, content: bytes, filename: str, folder: str) -> str:
        """Persist ``content`` and return a URL the client can fetch it from."""
        ...


class LocalFileStorage:
    """Writes files under ``root`` and serves them from ``url_prefix``.

    Stored names are random; only the original extension is kept.
    """

    def __init__(self, root: Path | str, url_prefix: str = "/uploads") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    async def save(self, content: bytes, filename: str, folder: str) -> str:
        ext = Path(filename).suffix.lower()
        relative = Path(folder) / f"{uuid.uuid4().hex}{ext}"
        target = self.root / relative
        await asyncio.to_thread(self._write, target, content)
        logger.info("Stored %d bytes at %s", len(content), relative)
        return f"{self.url_prefix}/{relative.as_posix()}"

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)


@lru_cache
def get_file_storage() -> FileStorage:
    """FastAPI dependency returning the process-wide storage backend."""
    settings = get_settings()
    return LocalFileStorage(settings.upload_dir, settings.upload_url_prefix)
