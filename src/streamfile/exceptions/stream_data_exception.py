from .stream_file_exception import StreamFileException


class StreamDataException(StreamFileException):
    """Base class for errors raised while producing the response body."""

    pass


class StreamReadException(StreamDataException):
    """Raised when reading from the file fails mid-stream."""

    def __init__(
        self,
        *,
        original_exception: Exception,
        position: int,
        byte_range: tuple[int, int],
    ) -> None:
        super().__init__(
            f"Read failed at position {position} for range {byte_range}: {original_exception}"
        )

        self.original_exception = original_exception
        self.position = position
        self.byte_range = byte_range


class StreamWriteException(StreamDataException):
    """Raised when the transport rejects a chunk, usually because the peer went away."""

    def __init__(
        self,
        *,
        original_exception: Exception,
        bytes_written: int,
    ) -> None:
        super().__init__(
            f"Write failed after {bytes_written} bytes, client likely disconnected: {original_exception}"
        )

        self.original_exception = original_exception
        self.bytes_written = bytes_written


class StreamTimeoutException(StreamDataException):
    """Raised when the request-scoped deadline passes before the body is drained."""

    def __init__(self, *, position: int, byte_range: tuple[int, int]) -> None:
        super().__init__(
            f"Deadline exceeded at position {position} for range {byte_range}."
        )

        self.position = position
        self.byte_range = byte_range


class StreamConsumedException(StreamDataException):
    """Raised when the body of a streamer is requested a second time."""

    def __init__(self) -> None:
        super().__init__(
            "The body has already been produced; create a new streamer to stream again."
        )


class StreamClosedException(StreamDataException):
    """Raised when the streamer is closed while its body is still being produced."""

    def __init__(self, *, position: int, byte_range: tuple[int, int]) -> None:
        super().__init__(
            f"Stream closed at position {position} before range {byte_range} was complete."
        )

        self.position = position
        self.byte_range = byte_range
