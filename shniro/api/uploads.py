"""Transient storage for uploaded images.

An uploaded image lives in a uniquely named temp file only for the
duration of one request; the file is removed when the context exits,
whether the provider call succeeded or raised.
"""

import logging
import os
import tempfile
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = "shniro-upload-"


@dataclass(frozen=True)
class UploadedAsset:
    """Reference to an uploaded file on disk.

    Attributes:
        path: Location of the temp file.
        mime_type: MIME type declared by the client.
    """

    path: Path
    mime_type: str

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def _discard(path: Path) -> None:
    """Delete a temp file, logging instead of raising on failure."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to delete uploaded file {path}: {e}")


@asynccontextmanager
async def stored_upload(
    content: bytes,
    mime_type: str,
    upload_dir: str,
) -> AsyncGenerator[UploadedAsset]:
    """Write upload content to a unique temp file and delete it on exit.

    Args:
        content: Raw uploaded bytes.
        mime_type: Declared MIME type.
        upload_dir: Directory for the temp file (created if missing).

    Yields:
        UploadedAsset pointing at the temp file.
    """
    Path(upload_dir).mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=upload_dir)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
        yield UploadedAsset(path=path, mime_type=mime_type)
    finally:
        _discard(path)
