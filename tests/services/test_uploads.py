"""Tests for image sniffing and storage of uploads."""

from pathlib import Path

import pytest

from agora.core.errors import StorageError, ValidationError
from agora.core.settings import settings
from agora.services.uploads import UNSUPPORTED_IMAGE, check_image, sniff_image_type, staged_image
from tests.conftest import png_bytes, stored_files


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"\xff\xd8\xff\xe0rest", "jpg"),
        (b"\x89PNG\r\n\x1a\nrest", "png"),
        (b"GIF89a...", "gif"),
        (b"GIF87a...", "gif"),
        (b"<svg></svg>", None),
        (b"", None),
    ],
)
def test_sniff_image_type(data: bytes, expected: str | None) -> None:
    assert sniff_image_type(data) == expected


def test_staged_image_writes_file_and_yields_url(upload_dir: str) -> None:
    with staged_image(png_bytes(), "post") as url:
        pass

    path = Path(url)
    assert path.suffix == ".png"
    assert path.name.startswith("post_")
    assert (Path(upload_dir) / path.name).read_bytes() == png_bytes()


def test_staged_image_without_upload_yields_none(upload_dir: str) -> None:
    with staged_image(None, "post") as url:
        assert url is None
    assert stored_files(upload_dir) == []


def test_staged_image_removes_file_when_block_fails(upload_dir: str) -> None:
    with pytest.raises(StorageError):
        with staged_image(png_bytes(), "avatar", f"{upload_dir}/profiles"):
            assert len(stored_files(upload_dir)) == 1
            raise StorageError()

    assert stored_files(upload_dir) == []


def test_check_image_ignores_claimed_type(upload_dir: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        with staged_image(b"MZ\x90\x00 definitely not an image", "avatar"):
            pass
    assert exc_info.value.detail == UNSUPPORTED_IMAGE
    assert stored_files(upload_dir) == []


def test_check_image_rejects_empty_and_oversize(monkeypatch) -> None:
    assert check_image(png_bytes()) == "png"
    with pytest.raises(ValidationError):
        check_image(b"")

    monkeypatch.setattr(settings, "upload_max_bytes", 16)
    with pytest.raises(ValidationError):
        check_image(png_bytes())
