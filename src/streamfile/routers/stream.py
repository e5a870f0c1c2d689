import os
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Request
from fastapi.responses import Response, StreamingResponse
from loguru import logger
from starlette.background import BackgroundTask

from streamfile.config import Config
from streamfile.exceptions import (
    FileSizeUnavailableException,
    MediaFileNotFoundException,
)
from streamfile.range_streamer import RangeStreamer

PathResolver = Callable[[str], str | os.PathLike | None]


def create_stream_router(
    resolve_path: PathResolver,
    *,
    config: Config | None = None,
    prefix: str = "/stream",
) -> APIRouter:
    """
    Build a router serving files with byte range support.

    Parameters:
        resolve_path: Maps the requested file id to a path on disk, or None
            when there is no such file.
        config: Streaming configuration; defaults to the process settings.
        prefix: URL prefix for the route.
    """

    router = APIRouter(
        responses={404: {"description": "Not found"}},
        prefix=prefix,
        tags=["stream"],
    )

    @router.get("/{file_id}", response_model=None)
    def stream_file(
        request: Request,
        file_id: Annotated[
            str,
            Path(
                description="The id of the file to stream",
                min_length=1,
            ),
        ],
    ) -> Response:
        path = resolve_path(file_id)

        if path is None:
            raise HTTPException(status_code=404, detail="File not found")

        try:
            streamer = RangeStreamer(
                path,
                request.headers.get("range"),
                config=config,
            )
            descriptor = streamer.build_response()
        except MediaFileNotFoundException as e:
            raise HTTPException(status_code=404, detail="File not found") from e
        except FileSizeUnavailableException as e:
            logger.error(f"Refusing to stream {file_id}: {e}")
            raise HTTPException(status_code=500, detail="File size not found") from e

        if not descriptor.has_body:
            return Response(
                status_code=descriptor.status,
                headers=descriptor.headers_dict,
            )

        return StreamingResponse(
            streamer.produce_body(),
            status_code=descriptor.status,
            headers=descriptor.headers_dict,
            media_type=streamer.file_metadata.mime_type,
            background=BackgroundTask(streamer.close),
        )

    return router
