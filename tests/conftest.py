from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Callable

import pytest


def _tarball_bytes(dirname: str, binaries: tuple[str, ...] = ("mongod", "mongo")) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        root = tarfile.TarInfo(dirname)
        root.type = tarfile.DIRTYPE
        root.mode = 0o755
        tf.addfile(root)
        bin_dir = tarfile.TarInfo(f"{dirname}/bin")
        bin_dir.type = tarfile.DIRTYPE
        bin_dir.mode = 0o755
        tf.addfile(bin_dir)
        for name in binaries:
            payload = f"#!/bin/sh\necho {name}\n".encode("utf-8")
            info = tarfile.TarInfo(f"{dirname}/bin/{name}")
            info.size = len(payload)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(payload))
    return buffer.getvalue()


@pytest.fixture
def make_tarball() -> Callable[..., bytes]:
    return _tarball_bytes


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    return tmp_path / ".monger"
