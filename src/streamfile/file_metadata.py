import os
from dataclasses import dataclass
from pathlib import Path

import magic
from loguru import logger

from streamfile.exceptions import MediaFileNotFoundException

# Answers from libmagic that say nothing about the actual format.
INCONCLUSIVE_MIME_TYPES = {"", "application/octet-stream"}


def sniff_mime_type(path: str, default: str) -> str:
    """Detect the MIME type of a file from its contents, falling back to ``default``."""

    try:
        mime_type = magic.from_file(path, mime=True)
    except (magic.MagicException, OSError) as e:
        logger.debug(f"MIME sniffing failed for {path}, using {default}: {e}")
        return default

    if not mime_type or mime_type in INCONCLUSIVE_MIME_TYPES:
        return default

    return mime_type


def get_last_modified(path: str) -> float:
    """The modification time of a file, or the epoch when it cannot be read."""

    try:
        return os.path.getmtime(path)
    except OSError as e:
        logger.debug(f"Could not read modification time of {path}: {e}")
        return 0.0


@dataclass(frozen=True)
class FileMetadata:
    """Metadata about the file being streamed, captured once when the stream is created."""

    path: str
    original_filename: str
    file_size: int
    mime_type: str
    last_modified: float

    @classmethod
    def from_path(cls, path: str | os.PathLike, *, default_mime_type: str) -> "FileMetadata":
        """Stat a file and build its metadata.

        Raises:
            MediaFileNotFoundException: If the path is not an existing regular file.
        """

        resolved = Path(path).absolute()

        if not resolved.is_file():
            raise MediaFileNotFoundException(path=str(path))

        try:
            file_size = resolved.stat().st_size
        except OSError as e:
            raise MediaFileNotFoundException(path=str(path)) from e

        return cls(
            path=str(resolved),
            original_filename=resolved.name,
            file_size=file_size,
            mime_type=sniff_mime_type(str(resolved), default_mime_type),
            last_modified=get_last_modified(str(resolved)),
        )
