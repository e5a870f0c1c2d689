from .stream_file_exception import (
    StreamFileException,
    MediaFileNotFoundException,
    FileOpenFailedException,
    FileSizeUnavailableException,
)
from .stream_data_exception import (
    StreamDataException,
    StreamReadException,
    StreamWriteException,
    StreamTimeoutException,
    StreamConsumedException,
    StreamClosedException,
)

__all__ = [
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
