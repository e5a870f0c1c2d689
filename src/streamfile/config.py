from dataclasses import dataclass

from streamfile.settings.models import StreamingModel


@dataclass(frozen=True)
class Config:
    """Configuration for a single file stream."""

    # Maximum number of bytes read from disk and handed to the transport at once.
    buffer_size: int = 512 * 1024

    # Used when the MIME type cannot be sniffed from the file contents.
    default_mime_type: str = "video/mp4"

    # Lifetime advertised through Cache-Control and Expires.
    cache_max_age_seconds: int = 30 * 24 * 60 * 60

    # Deadline for draining one body, measured from when the body is requested.
    # None disables the deadline for slow clients.
    stream_timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.buffer_size < 1:
            raise ValueError("Buffer size must be a positive number of bytes")

        if self.cache_max_age_seconds < 0:
            raise ValueError("Cache lifetime cannot be negative")

        if self.stream_timeout_seconds is not None and self.stream_timeout_seconds <= 0:
            raise ValueError("Stream timeout must be positive, or None for no limit")

    @classmethod
    def from_settings(cls, settings: StreamingModel | None = None) -> "Config":
        """Build a config from the streaming settings, defaulting to the process-wide ones."""

        if settings is None:
            from streamfile.settings import settings_manager

            settings = settings_manager.settings.streaming

        return cls(
            buffer_size=settings.buffer_size,
            default_mime_type=settings.default_mime_type,
            cache_max_age_seconds=settings.cache_max_age_seconds,
            stream_timeout_seconds=settings.stream_timeout_seconds,
        )
