import math
import os
import time
from collections.abc import AsyncGenerator, Callable, Generator
from contextlib import closing
from typing import BinaryIO

import trio
from loguru import logger

from .byte_range import ByteRange
from .config import Config
from .exceptions import (
    FileOpenFailedException,
    FileSizeUnavailableException,
    StreamClosedException,
    StreamConsumedException,
    StreamReadException,
    StreamTimeoutException,
    StreamWriteException,
)
from .file_metadata import FileMetadata
from .response import (
    ResponseDescriptor,
    build_content_response,
    build_unsatisfiable_response,
)
from .session_statistics import SessionStatistics
from .utils import benchmark


class RangeStreamer:
    """
    Serves one file for one HTTP request, honouring a single byte range.

    The streamer stats the file and resolves the requested range when it is
    created, describes the response to send, and produces the body lazily in
    chunks of at most ``config.buffer_size`` bytes. The file handle is only
    opened once the body is pulled, and is released when the body is
    exhausted, abandoned or the streamer is closed.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        range_header: str | None = None,
        *,
        config: Config | None = None,
    ) -> None:
        self.config = config or Config.from_settings()
        self.range_header = range_header
        self.session_statistics = SessionStatistics()

        self._file_handle: BinaryIO | None = None
        # trio wrapper around _file_handle while the async body is producing.
        self._async_file_handle: trio.abc.AsyncResource | None = None
        self._is_consumed = False

        self.file_metadata = FileMetadata.from_path(
            path,
            default_mime_type=self.config.default_mime_type,
        )

        file_size = self.file_metadata.file_size

        self.byte_range: ByteRange | None

        # A zero size has no valid range; it is reported when the response is built.
        if file_size == 0:
            self.byte_range = None
        elif range_header is not None:
            self.byte_range = ByteRange.from_header(range_header, file_size)
        else:
            self.byte_range = ByteRange.full(file_size)

        logger.log(
            "STREAM",
            self._build_log_message(
                f"Initialized stream for {file_size} bytes of {self.file_metadata.mime_type}, "
                f"range header={range_header!r}"
            ),
        )

        if self.byte_range is not None and not self.is_satisfiable:
            logger.debug(
                self._build_log_message(
                    f"Requested range is not satisfiable for file size {file_size}"
                )
            )

    @classmethod
    def create(
        cls,
        path: str | os.PathLike,
        range_header: str | None = None,
        *,
        config: Config | None = None,
    ) -> "RangeStreamer":
        """Create a streamer, raising MediaFileNotFoundException for a missing file."""

        return cls(path, range_header, config=config)

    @property
    def is_partial(self) -> bool:
        """Whether the client asked for a range rather than the whole file."""

        return self.range_header is not None

    @property
    def is_satisfiable(self) -> bool:
        return self.byte_range is not None and self.byte_range.is_satisfiable(
            self.file_metadata.file_size
        )

    @property
    def is_open(self) -> bool:
        return self._file_handle is not None

    def build_response(self, *, now: float | None = None) -> ResponseDescriptor:
        """Describe the response for this request.

        Parameters:
            now (float | None): POSIX time used for the Expires header.

        Returns:
            ResponseDescriptor: 200 for the whole file, 206 for a satisfiable
            range, 416 for an unsatisfiable one.

        Raises:
            FileSizeUnavailableException: If the file is empty. No header
            should be written in that case.
        """

        byte_range = self._require_byte_range()

        if not self.is_satisfiable:
            return build_unsatisfiable_response(
                metadata=self.file_metadata,
                byte_range=byte_range,
            )

        return build_content_response(
            metadata=self.file_metadata,
            byte_range=byte_range,
            is_partial=self.is_partial,
            config=self.config,
            now=now,
        )

    def produce_body(
        self,
        *,
        deadline: float | None = None,
    ) -> Generator[bytes, None, None]:
        """Produce the response body as a lazy, single-pass sequence of chunks.

        Parameters:
            deadline (float | None): ``time.monotonic()`` value after which
                streaming stops with StreamTimeoutException. Defaults to
                ``config.stream_timeout_seconds`` from now, if set.

        Returns:
            Generator[bytes, None, None]: Chunks covering exactly the resolved
            range. Empty when the range is not satisfiable.
        """

        byte_range = self._claim_body()

        if byte_range is None:
            return self._empty_body()

        if deadline is None and self.config.stream_timeout_seconds is not None:
            deadline = time.monotonic() + self.config.stream_timeout_seconds

        return self._read_chunks(byte_range, deadline=deadline)

    def aproduce_body(
        self,
        *,
        deadline: float | None = None,
    ) -> AsyncGenerator[bytes, None]:
        """Async counterpart of produce_body, to be iterated inside ``trio.run``.

        Parameters:
            deadline (float | None): ``trio.current_time()`` value after which
                streaming stops with StreamTimeoutException. Defaults to
                ``config.stream_timeout_seconds`` from the first pull, if set.
        """

        byte_range = self._claim_body()

        if byte_range is None:
            return self._aempty_body()

        return self._aread_chunks(byte_range, deadline=deadline)

    def stream_to(
        self,
        write: Callable[[bytes], object],
        *,
        deadline: float | None = None,
    ) -> int:
        """Drain the body into a transport write callable.

        A write raising OSError is taken as the peer going away: the file
        handle is released straight away and StreamWriteException is raised.

        Returns:
            int: The number of bytes handed to ``write``.
        """

        bytes_written = 0

        with (
            closing(self.produce_body(deadline=deadline)) as body,
            benchmark(
                log=lambda duration: logger.log(
                    "STREAM",
                    self._build_log_message(
                        f"Wrote {bytes_written} bytes in {duration}s"
                    ),
                )
            ),
        ):
            for chunk in body:
                try:
                    write(chunk)
                except OSError as e:
                    logger.log(
                        "STREAM",
                        self._build_log_message(
                            f"Client disconnected after {bytes_written} bytes: {e}"
                        ),
                    )

                    raise StreamWriteException(
                        original_exception=e,
                        bytes_written=bytes_written,
                    ) from e

                bytes_written += len(chunk)

        return bytes_written

    def close(self) -> None:
        """Release the file handle if it is open. Safe to call more than once."""

        if self._file_handle is None:
            return

        file_handle, self._file_handle = self._file_handle, None
        self._async_file_handle = None
        file_handle.close()

        logger.log(
            "STREAM",
            self._build_log_message(
                f"Closed file handle after {self.session_statistics.bytes_transferred} bytes"
            ),
        )

    def __enter__(self) -> "RangeStreamer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    async def aclose(self) -> None:
        """Release the file handle from async code. Safe to call more than once."""

        async_file_handle = self._async_file_handle

        if async_file_handle is None:
            self.close()
            return

        self._async_file_handle = None
        await async_file_handle.aclose()
        self.close()

    async def __aenter__(self) -> "RangeStreamer":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()

    def _require_byte_range(self) -> ByteRange:
        if self.byte_range is None:
            logger.error(self._build_log_message("File size is zero or unknown"))

            raise FileSizeUnavailableException(path=self.file_metadata.path)

        return self.byte_range

    def _claim_body(self) -> ByteRange | None:
        """Mark the body as consumed, returning the range to read or None for no body."""

        byte_range = self._require_byte_range()

        if self._is_consumed:
            raise StreamConsumedException()

        self._is_consumed = True

        if not self.is_satisfiable:
            logger.debug(
                self._build_log_message("Range not satisfiable, no body is produced")
            )

            return None

        return byte_range

    def _open_file(self) -> BinaryIO:
        """Open the file handle if it is not open yet."""

        if self._file_handle is None:
            try:
                self._file_handle = open(self.file_metadata.path, "rb")
            except OSError as e:
                logger.error(self._build_log_message(f"File open failed: {e}"))

                raise FileOpenFailedException(
                    path=self.file_metadata.path,
                    original_exception=e,
                ) from e

        return self._file_handle

    async def _aopen_file(self) -> trio.abc.AsyncResource:
        """Open the file through trio, sharing the raw handle with close()."""

        try:
            async_file_handle = await trio.open_file(self.file_metadata.path, "rb")
        except OSError as e:
            logger.error(self._build_log_message(f"File open failed: {e}"))

            raise FileOpenFailedException(
                path=self.file_metadata.path,
                original_exception=e,
            ) from e

        self._async_file_handle = async_file_handle
        self._file_handle = async_file_handle.wrapped

        return async_file_handle

    def _raise_closed(self, *, position: int, byte_range: ByteRange) -> None:
        logger.warning(
            self._build_log_message(f"Stream closed at position {position} before range end")
        )

        raise StreamClosedException(
            position=position,
            byte_range=(byte_range.start, byte_range.end),
        )

    @staticmethod
    def _empty_body() -> Generator[bytes, None, None]:
        yield from ()

    @staticmethod
    async def _aempty_body() -> AsyncGenerator[bytes, None]:
        return
        yield

    def _read_chunks(
        self,
        byte_range: ByteRange,
        *,
        deadline: float | None,
    ) -> Generator[bytes, None, None]:
        start, end = byte_range.start, byte_range.end
        position = start

        try:
            file_handle = self._open_file()

            try:
                file_handle.seek(start)
            except OSError as e:
                raise StreamReadException(
                    original_exception=e,
                    position=position,
                    byte_range=(start, end),
                ) from e

            while position <= end:
                # Released through close() while suspended.
                if self._file_handle is None:
                    self._raise_closed(position=position, byte_range=byte_range)

                if deadline is not None and time.monotonic() > deadline:
                    logger.warning(
                        self._build_log_message(f"Deadline exceeded at position {position}")
                    )

                    raise StreamTimeoutException(position=position, byte_range=(start, end))

                read_size = min(self.config.buffer_size, end - position + 1)

                try:
                    data = file_handle.read(read_size)
                except OSError as e:
                    logger.error(
                        self._build_log_message(f"Read failed at position {position}: {e}")
                    )

                    raise StreamReadException(
                        original_exception=e,
                        position=position,
                        byte_range=(start, end),
                    ) from e

                if not data:
                    logger.warning(
                        self._build_log_message(
                            f"Reached end of file at position {position} before range end {end}"
                        )
                    )
                    break

                position += len(data)
                self.session_statistics.record_chunk(len(data))

                yield data
        finally:
            self.close()

    async def _aread_chunks(
        self,
        byte_range: ByteRange,
        *,
        deadline: float | None,
    ) -> AsyncGenerator[bytes, None]:
        start, end = byte_range.start, byte_range.end
        position = start

        if deadline is None:
            timeout = self.config.stream_timeout_seconds
            deadline = trio.current_time() + timeout if timeout is not None else math.inf

        try:
            file_handle = await self._aopen_file()

            try:
                await file_handle.seek(start)
            except OSError as e:
                raise StreamReadException(
                    original_exception=e,
                    position=position,
                    byte_range=(start, end),
                ) from e

            while position <= end:
                # Released through close() or aclose() while suspended.
                if self._async_file_handle is None:
                    self._raise_closed(position=position, byte_range=byte_range)

                read_size = min(self.config.buffer_size, end - position + 1)

                try:
                    with trio.fail_at(deadline):
                        data = await file_handle.read(read_size)
                except trio.TooSlowError as e:
                    logger.warning(
                        self._build_log_message(f"Deadline exceeded at position {position}")
                    )

                    raise StreamTimeoutException(
                        position=position,
                        byte_range=(start, end),
                    ) from e
                except OSError as e:
                    logger.error(
                        self._build_log_message(f"Read failed at position {position}: {e}")
                    )

                    raise StreamReadException(
                        original_exception=e,
                        position=position,
                        byte_range=(start, end),
                    ) from e

                if not data:
                    logger.warning(
                        self._build_log_message(
                            f"Reached end of file at position {position} before range end {end}"
                        )
                    )
                    break

                position += len(data)
                self.session_statistics.record_chunk(len(data))

                yield data
        finally:
            await self.aclose()

    def _build_log_message(self, message: str) -> str:
        if self.byte_range is not None:
            range_string = f"{self.byte_range.start}-{self.byte_range.end}"
        else:
            range_string = "none"

        return f"{message} [file={self.file_metadata.original_filename} | range={range_string}]"
