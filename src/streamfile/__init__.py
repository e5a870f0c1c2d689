from .utils.logging import setup_logger
from .byte_range import ByteRange, parse_range_header
from .config import Config
from .file_metadata import FileMetadata
from .range_streamer import RangeStreamer
from .response import ResponseDescriptor
from .exceptions import (
    StreamFileException,
    MediaFileNotFoundException,
    FileOpenFailedException,
    FileSizeUnavailableException,
    StreamDataException,
    StreamReadException,
    StreamWriteException,
    StreamTimeoutException,
    StreamConsumedException,
    StreamClosedException,
)

__all__ = [
    "setup_logger",
    "ByteRange",
    "parse_range_header",
    "Config",
    "FileMetadata",
    "RangeStreamer",
    "ResponseDescriptor",
    "StreamFileException",
    "MediaFileNotFoundException",
    "FileOpenFailedException",
    "FileSizeUnavailableException",
    "StreamDataException",
    "StreamReadException",
    "StreamWriteException",
    "StreamTimeoutException",
    "StreamConsumedException",
    "StreamClosedException",
]
