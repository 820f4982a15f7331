"""Atomic file replacement for PKI state files."""

import os
import tempfile
from pathlib import Path


def atomic_write_bytes(path: Path, data: bytes, mode: int = 0o644) -> Path:
    """Replace path with data so readers see either the old or the new content.

    Writes to a temp file in the same directory, fsyncs it, renames it over
    the destination and fsyncs the directory so the rename is durable.

    Args:
        path: Destination file path
        data: Full new file content
        mode: Permission bits applied to the new file

    Returns:
        The destination path
    """
    parent = path.parent
    with tempfile.NamedTemporaryFile(delete=False, dir=parent, prefix=f".{path.name}.") as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    try:
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    dir_fd = os.open(parent, os.O_DIRECTORY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)

    return path
