from __future__ import annotations

import io
import tarfile
from pathlib import Path

import pytest

from monger_core.archive import extract_archive
from monger_core.errors import ExtractionFailed


def _write_tar(path: Path, members: dict[str, bytes]) -> None:
    with tarfile.open(path, "w:gz") as tf:
        for name, payload in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            tf.addfile(info, io.BytesIO(payload))


def test_extract_keeps_top_level_directory(tmp_path: Path, make_tarball) -> None:
    archive = tmp_path / "mongodb-linux-x86_64-4.2.0.tgz"
    archive.write_bytes(make_tarball("mongodb-linux-x86_64-4.2.0"))

    extract_archive(archive, tmp_path / "out")

    assert (tmp_path / "out" / "mongodb-linux-x86_64-4.2.0" / "bin" / "mongod").is_file()


def test_extract_rejects_path_traversal(tmp_path: Path) -> None:
    archive = tmp_path / "evil.tgz"
    _write_tar(archive, {"../escaped.txt": b"nope"})

    with pytest.raises(ExtractionFailed):
        extract_archive(archive, tmp_path / "out")
    assert not (tmp_path / "escaped.txt").exists()


def test_extract_wraps_corrupt_archives(tmp_path: Path) -> None:
    archive = tmp_path / "broken.tgz"
    archive.write_bytes(b"this is not a tarball")

    with pytest.raises(ExtractionFailed):
        extract_archive(archive, tmp_path / "out")


def test_extract_rejects_absolute_members_before_writing_anything(tmp_path: Path) -> None:
    archive = tmp_path / "evil.tgz"
    target = tmp_path / "absolute.txt"
    _write_tar(archive, {"mongodb-linux-x86_64-4.2.0/README": b"ok", str(target): b"nope"})

    with pytest.raises(ExtractionFailed) as excinfo:
        extract_archive(archive, tmp_path / "out")
    assert "escapes" in str(excinfo.value)
    assert not target.exists()
    assert not (tmp_path / "out" / "mongodb-linux-x86_64-4.2.0").exists()
