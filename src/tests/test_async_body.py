from contextlib import aclosing

import pytest
import trio

from streamfile.config import Config
from streamfile.exceptions import (
    FileOpenFailedException,
    StreamClosedException,
    StreamConsumedException,
    StreamTimeoutException,
)
from streamfile.range_streamer import RangeStreamer


@pytest.fixture
def opened_files(monkeypatch):
    """Record every file opened through trio so tests can check it was closed."""
    opened = []
    real_open_file = trio.open_file

    async def recording_open_file(*args, **kwargs):
        file_handle = await real_open_file(*args, **kwargs)
        opened.append(file_handle)
        return file_handle

    monkeypatch.setattr(trio, "open_file", recording_open_file)
    return opened


async def collect(body):
    async with aclosing(body) as chunks:
        return [chunk async for chunk in chunks]


def test_async_partial_range(media_file, file_bytes, config, opened_files):
    streamer = RangeStreamer(media_file, "bytes=100-299", config=config)

    chunks = trio.run(collect, streamer.aproduce_body())

    assert b"".join(chunks) == file_bytes[100:300]
    assert all(len(chunk) <= 64 for chunk in chunks)
    assert opened_files[0].closed


def test_async_full_file(media_file, file_bytes, config):
    streamer = RangeStreamer(media_file, config=config)

    assert b"".join(trio.run(collect, streamer.aproduce_body())) == file_bytes


def test_async_unsatisfiable_range_never_opens(media_file, config, opened_files):
    streamer = RangeStreamer(media_file, "bytes=2000-", config=config)

    assert trio.run(collect, streamer.aproduce_body()) == []
    assert opened_files == []


def test_async_abandoned_body_releases_handle(media_file, config, opened_files):
    streamer = RangeStreamer(media_file, config=config)

    async def take_one():
        async with aclosing(streamer.aproduce_body()) as body:
            async for chunk in body:
                return chunk

    chunk = trio.run(take_one)

    assert len(chunk) == 64
    assert opened_files[0].closed


def test_async_expired_deadline(media_file, config, opened_files):
    streamer = RangeStreamer(media_file, config=config)

    async def run():
        await collect(streamer.aproduce_body(deadline=trio.current_time() - 1))

    with pytest.raises(StreamTimeoutException) as exc_info:
        trio.run(run)

    assert exc_info.value.byte_range == (0, 999)
    assert opened_files[0].closed


def test_async_open_failure(media_file):
    streamer = RangeStreamer(media_file, config=Config())
    media_file.unlink()

    with pytest.raises(FileOpenFailedException):
        trio.run(collect, streamer.aproduce_body())


def test_async_body_is_single_pass(media_file, config):
    streamer = RangeStreamer(media_file, config=config)
    list(streamer.produce_body())

    with pytest.raises(StreamConsumedException):
        streamer.aproduce_body()


def test_async_handle_tracked_while_producing(media_file, config, opened_files):
    streamer = RangeStreamer(media_file, config=config)

    async def run():
        async with aclosing(streamer.aproduce_body()) as body:
            await anext(body)
            assert streamer.is_open

    trio.run(run)

    assert opened_files[0].closed
    assert not streamer.is_open


def test_async_body_abandoned_inside_with_block_releases_handle(media_file, config, opened_files):
    async def run():
        with RangeStreamer(media_file, config=config) as streamer:
            body = streamer.aproduce_body()
            await anext(body)

        assert opened_files[0].closed
        assert not streamer.is_open
        await body.aclose()

    trio.run(run)


def test_async_context_manager_releases_handle(media_file, config, opened_files):
    async def run():
        async with RangeStreamer(media_file, config=config) as streamer:
            body = streamer.aproduce_body()
            await anext(body)

        assert opened_files[0].closed
        assert not streamer.is_open
        await body.aclose()

    trio.run(run)


def test_aclose_while_body_is_paused_raises_on_next_pull(media_file, config, opened_files):
    streamer = RangeStreamer(media_file, "bytes=100-499", config=config)

    async def run():
        body = streamer.aproduce_body()
        await anext(body)
        await streamer.aclose()

        with pytest.raises(StreamClosedException) as exc_info:
            await anext(body)

        return exc_info.value

    exception = trio.run(run)

    assert exception.position == 164
    assert exception.byte_range == (100, 499)
    assert opened_files[0].closed


def test_aclose_is_idempotent(media_file, config):
    streamer = RangeStreamer(media_file, config=config)

    async def run():
        await streamer.aclose()
        await streamer.aclose()

    trio.run(run)

    assert not streamer.is_open
