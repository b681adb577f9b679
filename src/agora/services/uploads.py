"""Storage of uploaded images: sniff the bytes, write them, return a URL."""
from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from agora.core.errors import ValidationError
from agora.core.settings import settings

logger = logging.getLogger(__name__)

UNSUPPORTED_IMAGE = "Unsupported image format (use JPG, PNG, or GIF)"

# Leading signature bytes -> canonical extension.
_IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "jpg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
)


def sniff_image_type(data: bytes) -> str | None:
    """Return ``jpg``, ``png`` or ``gif`` from the content bytes, else None."""
    for signature, extension in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return extension
    return None


def check_image(data: bytes) -> str:
    """Return the extension for ``data`` or raise :class:`ValidationError`.

    The declared filename is ignored; only the content decides the type.
    """
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > settings.upload_max_bytes:
        raise ValidationError("Uploaded file is too large")
    extension = sniff_image_type(data)
    if extension is None:
        raise ValidationError(UNSUPPORTED_IMAGE)
    return extension


def _public_url(path: Path) -> str:
    return "/" + path.as_posix().lstrip("./")


def _write_image(data: bytes, prefix: str, upload_dir: str | None) -> Path:
    extension = check_image(data)
    directory = Path(upload_dir or settings.upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{prefix}_{time.time_ns()}_{uuid.uuid4().hex[:8]}.{extension}"
    path.write_bytes(data)
    logger.info("Stored %s upload at %s", prefix, _public_url(path))
    return path


@contextmanager
def staged_image(
    data: bytes | None,
    prefix: str,
    upload_dir: str | None = None,
) -> Iterator[str | None]:
    """Store ``data`` for the duration of the block, yielding its URL.

    The file is removed again if the block raises, so a failed write to the
    database leaves nothing behind. ``None`` means no upload and yields None.
    """
    if data is None:
        yield None
        return
    path = _write_image(data, prefix, upload_dir)
    try:
        yield _public_url(path)
    except Exception:
        path.unlink(missing_ok=True)
        logger.info("Removed %s upload %s after a failed write", prefix, path.name)
        raise
