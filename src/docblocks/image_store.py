"""Local object storage for images referenced by image blocks.

Uploaded files are copied into the data directory under a timestamped name
with a random suffix, so two uploads never share a file.
Blocks only ever hold the resulting URL; nothing else in docblocks reads
image bytes.
"""

from __future__ import annotations

import logging
import mimetypes
import re
import shutil
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .config import LIMITS
from .errors import StorageError, ValidationError
from .settings import images_dir, settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class UploadedImage:
    url: str
    filename: str
    mime_type: str
    size: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _safe_name(name: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("-", name).strip("-.")
    return cleaned or "image"


def _public_url(path: Path) -> str:
    if settings.image_base_url:
        return f"{settings.image_base_url.rstrip('/')}/{path.name}"
    return path.resolve().as_uri()


def _describe(path: Path) -> UploadedImage:
    mime_type, _ = mimetypes.guess_type(path.name)
    return UploadedImage(
        url=_public_url(path),
        filename=path.name,
        mime_type=mime_type or "application/octet-stream",
        size=path.stat().st_size,
    )


def upload_image(source: Path | str) -> UploadedImage:
    """Copy an image file into the store.

    Args:
        source: Path of the file to upload.

    Returns:
        The stored image's URL, filename, MIME type and size.

    Raises:
        ValidationError: If the file is missing, not an image, or too large.
        StorageError: If the copy fails.
    """
    source = Path(source)
    if not source.is_file():
        raise ValidationError("Image file not found", field="path", value=str(source))

    mime_type, _ = mimetypes.guess_type(source.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError(
            "Only image files can be uploaded",
            field="path",
            value=source.name,
            constraint="image/*",
        )

    size = source.stat().st_size
    if size > LIMITS.MAX_IMAGE_BYTES:
        raise ValidationError(
            f"Image is larger than {LIMITS.MAX_IMAGE_BYTES} bytes",
            field="path",
            value=source.name,
            constraint="max_size",
        )

    target_dir = images_dir()
    filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{_safe_name(source.name)}"
    target = target_dir / filename
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
    except OSError as e:
        raise StorageError(
            f"Failed to store image: {e}",
            operation="upload_image",
            path=str(target),
        ) from e

    logger.info("Stored image %s (%d bytes)", filename, size)
    return _describe(target)


def list_images() -> list[UploadedImage]:
    """List stored images, newest first."""
    directory = images_dir()
    if not directory.is_dir():
        return []
    files = [p for p in directory.iterdir() if p.is_file()]
    files.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return [_describe(p) for p in files]
