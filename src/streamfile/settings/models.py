"""streamfile settings models"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class StreamingModel(BaseModel):
    buffer_size: int = Field(
        default=512 * 1024,
        ge=1,
        description="Maximum size in bytes of a single chunk read from disk",
    )
    default_mime_type: str = Field(
        default="video/mp4",
        description="MIME type used when content sniffing fails or is inconclusive",
    )
    cache_max_age_seconds: int = Field(
        default=30 * 24 * 60 * 60,
        ge=0,
        description="Lifetime advertised in Cache-Control and Expires (30 days default)",
    )
    stream_timeout_seconds: float | None = Field(
        default=None,
        description="Deadline for draining a single response body; unset means no limit",
    )

    @field_validator("default_mime_type")
    def check_mime_type(cls, v: str) -> str:
        if "/" not in v:
            raise ValueError("Must be a MIME type of the form type/subtype")
        return v

    @field_validator("stream_timeout_seconds")
    def check_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Must be greater than 0, or unset for no limit")
        return v


class AppModel(BaseModel):
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    streaming: StreamingModel = StreamingModel()
