import time
from dataclasses import dataclass
from email.utils import formatdate
from http import HTTPStatus

from streamfile.byte_range import ByteRange
from streamfile.config import Config
from streamfile.file_metadata import FileMetadata


@dataclass(frozen=True)
class ResponseDescriptor:
    """Status line and headers for a file response, ready to be written by the host."""

    status: HTTPStatus
    headers: tuple[tuple[str, str], ...]
    byte_range: ByteRange

    @property
    def has_body(self) -> bool:
        """Whether a body follows the headers. A 416 ends the response after them."""

        return self.status != HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE

    @property
    def content_length(self) -> int:
        """The number of body bytes the host should expect to write."""

        return self.byte_range.length if self.has_body else 0

    @property
    def headers_dict(self) -> dict[str, str]:
        return dict(self.headers)

    def get_header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""

        for key, value in self.headers:
            if key.lower() == name.lower():
                return value

        return None


def http_date(timestamp: float) -> str:
    """Format a POSIX timestamp as an RFC 1123 date in GMT."""

    return formatdate(timestamp, usegmt=True)


def build_unsatisfiable_response(
    *,
    metadata: FileMetadata,
    byte_range: ByteRange,
) -> ResponseDescriptor:
    """A 416 response echoing the requested (unclamped) range against the real size."""

    return ResponseDescriptor(
        status=HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE,
        headers=(
            ("Content-Range", byte_range.content_range(metadata.file_size)),
            ("Accept-Ranges", f"0-{metadata.file_size - 1}"),
        ),
        byte_range=byte_range,
    )


def build_content_response(
    *,
    metadata: FileMetadata,
    byte_range: ByteRange,
    is_partial: bool,
    config: Config,
    now: float | None = None,
) -> ResponseDescriptor:
    """A 200 or 206 response for a satisfiable range.

    Parameters:
        metadata (FileMetadata): The file being served.
        byte_range (ByteRange): The resolved, satisfiable range.
        is_partial (bool): Whether the client asked for a range.
        config (Config): Supplies the cache lifetime.
        now (float | None): Current POSIX time for the Expires header.

    Returns:
        ResponseDescriptor: The descriptor with headers in emission order.
    """

    if now is None:
        now = time.time()

    headers: list[tuple[str, str]] = []

    if is_partial:
        status = HTTPStatus.PARTIAL_CONTENT
        stream_length = byte_range.length
        headers.append(("Content-Range", byte_range.content_range(metadata.file_size)))
    else:
        status = HTTPStatus.OK
        stream_length = metadata.file_size

    max_age = config.cache_max_age_seconds

    headers.extend(
        [
            ("Content-Type", metadata.mime_type),
            ("Cache-Control", f"max-age={max_age}, public"),
            ("Expires", http_date(now + max_age)),
            ("Last-Modified", http_date(metadata.last_modified)),
            # Not the standard "bytes" token; existing clients rely on this value.
            ("Accept-Ranges", f"0-{metadata.file_size - 1}"),
            ("Content-Length", str(stream_length)),
            (
                "Content-Disposition",
                f'inline; filename="{metadata.original_filename}"',
            ),
        ]
    )

    return ResponseDescriptor(
        status=status,
        headers=tuple(headers),
        byte_range=byte_range,
    )
