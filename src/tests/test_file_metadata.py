import os

import magic
import pytest

from streamfile.exceptions import MediaFileNotFoundException
from streamfile.file_metadata import FileMetadata, get_last_modified, sniff_mime_type


def test_from_path_captures_snapshot(media_file):
    os.utime(media_file, (1_000_000_000, 1_000_000_000))

    metadata = FileMetadata.from_path(media_file, default_mime_type="video/mp4")

    assert metadata.path == str(media_file.absolute())
    assert metadata.original_filename == "clip.bin"
    assert metadata.file_size == 1000
    assert metadata.last_modified == 1_000_000_000


def test_unrecognised_content_falls_back_to_default(media_file):
    metadata = FileMetadata.from_path(media_file, default_mime_type="video/mp4")

    assert metadata.mime_type == "video/mp4"


def test_mime_type_sniffed_from_content(make_file):
    path = make_file(
        "document.mp4",
        b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n",
    )

    assert sniff_mime_type(str(path), "video/mp4") == "application/pdf"


def test_sniffing_failure_falls_back_to_default(media_file, monkeypatch):
    def failing_from_file(*args, **kwargs):
        raise magic.MagicException("no magic database")

    monkeypatch.setattr(magic, "from_file", failing_from_file)

    assert sniff_mime_type(str(media_file), "video/webm") == "video/webm"


def test_missing_file_raises(tmp_path):
    with pytest.raises(MediaFileNotFoundException) as exc_info:
        FileMetadata.from_path(tmp_path / "missing.mp4", default_mime_type="video/mp4")

    assert exc_info.value.path.endswith("missing.mp4")


def test_directory_is_not_a_file(tmp_path):
    with pytest.raises(MediaFileNotFoundException):
        FileMetadata.from_path(tmp_path, default_mime_type="video/mp4")


def test_last_modified_falls_back_to_epoch(tmp_path):
    assert get_last_modified(str(tmp_path / "missing.mp4")) == 0.0
