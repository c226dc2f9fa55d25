from __future__ import annotations

import logging
import tarfile
from pathlib import Path

from .errors import ExtractionFailed

logger = logging.getLogger(__name__)


def extract_archive(archive_path: Path, destination: Path) -> None:
    """Unpack a release tarball beneath ``destination``, keeping its top-level directory.

    Members that would land outside ``destination`` (absolute paths, ``..``
    components, links resolving elsewhere) abort the whole extraction.
    """
    destination.mkdir(parents=True, exist_ok=True)
    root = destination.resolve()
    logger.debug("extracting %s into %s", archive_path, root)
    try:
        with tarfile.open(archive_path, "r:*") as tf:
            members = tf.getmembers()
            for member in members:
                landing = (root / member.name).resolve()
                if landing != root and root not in landing.parents:
                    raise ExtractionFailed(str(archive_path), f"member escapes destination: {member.name}")
            if hasattr(tarfile, "tar_filter"):
                tf.extractall(root, members=members, filter="tar")
            else:
                tf.extractall(root, members=members)
    except tarfile.TarError as exc:
        raise ExtractionFailed(str(archive_path), str(exc)) from exc
