from streamfile.routers.stream import create_stream_router

__all__ = ["create_stream_router"]
