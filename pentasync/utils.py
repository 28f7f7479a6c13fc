"""
Shared utility functions for pentasync.

JSON reads used by the cache and config loaders, content digests, and the
atomic temp-file-then-os.replace() byte writer used by the synchronizer so
that readers never observe a partially-written page.
"""

import hashlib
import json
import logging
import os
import tempfile

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------

def read_json_strict(path):
    """Read a JSON file, raising ``ValueError`` if it is not valid JSON.

    ``FileNotFoundError`` and other ``OSError``s propagate unchanged.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            return json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path}: not valid JSON ({exc})") from exc


# ---------------------------------------------------------------------------
# Digests
# ---------------------------------------------------------------------------

def content_digest(data: bytes) -> str:
    """Return the lowercase SHA-256 hex digest of *data*."""
    return hashlib.sha256(data).hexdigest()


def file_digest(path) -> str | None:
    """Return the SHA-256 digest of the file at *path*.

    Returns ``None`` when the file does not exist or cannot be read, so
    callers can treat an unreadable page the same as a missing one.
    """
    sha = hashlib.sha256()
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(65536), b""):
                sha.update(chunk)
    except OSError:
        logger.debug("Could not read %s for digest", path, exc_info=True)
        return None
    return sha.hexdigest()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------

def atomic_write_bytes(path, data: bytes) -> None:
    """Atomically write *data* to *path*.

    Uses a temporary file in the same directory followed by
    ``os.replace()`` so that readers never see a partially-written file.
    Parent directories are created if they do not exist; concurrent
    creation of the same parent by another writer is not an error.

    Parameters
    ----------
    path : str or pathlib.Path
        Absolute path to the target file.
    data : bytes
        The complete new content.
    """
    path = str(path)
    parent = os.path.dirname(path)
    os.makedirs(parent, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=parent, prefix=".pentasync-", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
