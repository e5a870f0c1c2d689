import re
from dataclasses import dataclass

from loguru import logger

# Single range only. Searched rather than anchored, so leading garbage is ignored.
RANGE_HEADER_PATTERN = re.compile(r"bytes=(\d+)-(\d+)?")


def parse_range_header(value: str) -> tuple[int, int | None]:
    """Parse a raw Range header value into a start offset and an optional end offset.

    Parsing is tolerant: a value that does not match ``bytes=START-END?`` is
    read as ``start=0`` with no end, the same as ``bytes=0-``.

    Parameters:
        value (str): The raw value of the Range request header.

    Returns:
        tuple[int, int | None]: The requested start and end offsets. The end is
        None when the client left it out.
    """

    match = RANGE_HEADER_PATTERN.search(value)

    if not match:
        logger.debug(f"Malformed Range header {value!r}, defaulting to bytes=0-")

        return 0, None

    start, end = match.groups()

    return int(start), int(end) if end is not None else None


@dataclass(frozen=True)
class ByteRange:
    """An inclusive span of byte offsets within a file."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < 0:
            raise ValueError("Byte range start and end must be non-negative integers.")

    @property
    def length(self) -> int:
        """The number of bytes covered by this range."""

        return self.end - self.start + 1

    def is_satisfiable(self, file_size: int) -> bool:
        """Whether the range can be served from a file of the given size."""

        return not (
            self.end < self.start or self.end >= file_size or self.start >= file_size
        )

    def content_range(self, file_size: int) -> str:
        """The Content-Range header value for this range."""

        return f"bytes {self.start}-{self.end}/{file_size}"

    @classmethod
    def full(cls, file_size: int) -> "ByteRange":
        """The range covering a whole file."""

        return cls(start=0, end=file_size - 1)

    @classmethod
    def resolve(cls, *, start: int, end: int | None, file_size: int) -> "ByteRange":
        """Resolve requested offsets against the file size.

        A missing end, or an explicit end of 0 after a non-zero start, stands for
        the last byte of the file. ``bytes=0-0`` keeps its literal meaning of the
        first byte only. No clamping happens here, so an out of bounds request
        stays out of bounds and can be reported as such.
        """

        if end is None or (end == 0 and start != 0):
            end = file_size - 1

        return cls(start=start, end=end)

    @classmethod
    def from_header(cls, value: str, file_size: int) -> "ByteRange":
        """Parse and resolve a raw Range header value against the file size."""

        start, end = parse_range_header(value)

        return cls.resolve(start=start, end=end, file_size=file_size)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(start={self.start}, end={self.end}, length={self.length})"
