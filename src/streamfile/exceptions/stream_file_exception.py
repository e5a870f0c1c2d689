class StreamFileException(Exception):
    """Base class for streamfile exceptions."""

    pass


class MediaFileNotFoundException(StreamFileException):
    """Raised when the path does not name an existing regular file."""

    def __init__(self, *, path: str) -> None:
        super().__init__(f"File not found: {path}")

        self.path = path


class FileOpenFailedException(StreamFileException):
    """Raised when the file exists but cannot be opened for reading."""

    def __init__(self, *, path: str, original_exception: Exception) -> None:
        super().__init__(f"File open failed for {path}: {original_exception}")

        self.path = path
        self.original_exception = original_exception


class FileSizeUnavailableException(StreamFileException):
    """Raised when the file size is zero or could not be determined."""

    def __init__(self, *, path: str) -> None:
        super().__init__(f"File size not found for {path}")

        self.path = path
