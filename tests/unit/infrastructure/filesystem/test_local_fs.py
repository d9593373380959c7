import asyncio
import pytest

from acedeck.domain.models.common import FilePath
from acedeck.infrastructure.filesystem.local_fs import LocalFileSystem


@pytest.fixture
def local_fs():
    return LocalFileSystem()


def test_write_text_creates_parent_directories(local_fs, tmp_path):
    target = tmp_path / "exports" / "physics" / "notes.txt"

    asyncio.run(local_fs.write_text(FilePath(str(target)), "TOPIC: Atoms\nनमस्ते"))

    assert target.read_text(encoding="utf-8") == "TOPIC: Atoms\nनमस्ते"


def test_write_bytes(local_fs, tmp_path):
    target = tmp_path / "lesson.wav"

    asyncio.run(local_fs.write_bytes(FilePath(str(target)), b"RIFF\x00\x01"))

    assert target.read_bytes() == b"RIFF\x00\x01"


def test_permission_error_is_reraised(local_fs, tmp_path, mocker):
    mocker.patch(
        'acedeck.infrastructure.filesystem.local_fs.aiofiles.open',
        side_effect=PermissionError("denied"),
    )

    with pytest.raises(PermissionError, match="Permission denied"):
        asyncio.run(local_fs.write_text(FilePath(str(tmp_path / "notes.txt")), "x"))


def test_other_os_errors_become_io_errors(local_fs, tmp_path, mocker):
    mocker.patch(
        'acedeck.infrastructure.filesystem.local_fs.aiofiles.open',
        side_effect=IsADirectoryError("is a directory"),
    )

    with pytest.raises(IOError, match="Failed to write file"):
        asyncio.run(local_fs.write_bytes(FilePath(str(tmp_path / "image.png")), b"\x89PNG"))
