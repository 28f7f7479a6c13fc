"""
pentasync/artifact_sync.py -- Reconciles an output tree against a desired set.

Given the desired set of pages (target path -> content bytes), the
synchronizer makes the output root contain exactly those files:

    1. For every desired page, compare the SHA-256 digest of the new
       content with the digest of the file on disk.  Missing (or
       unreadable) files are created, differing files are replaced
       atomically, identical files are left alone.
    2. Once every page has been handled, delete the files that existed
       before the run but were not produced by it.
    3. Remove directories left empty, repeating the scan until no empty
       directory remains (removing a directory can empty its parent).

The output root itself is never removed and nothing outside it is ever
touched.  Per-page work may run on a thread pool; the deletion phase
always waits for every page to finish first.

Transient I/O errors (EAGAIN, EBUSY, EINTR, ETIMEDOUT, ESTALE) on a write
or delete are retried with exponential backoff.  Any other OSError
propagates immediately.

Usage:
    from pentasync.artifact_sync import synchronize

    report = synchronize("content/schedule", {"room/hall_a.html": b"..."})
    print(report.summary())
"""

from __future__ import annotations

import errno
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Mapping

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from pentasync.utils import atomic_write_bytes, content_digest, file_digest

logger = logging.getLogger(__name__)

TRANSIENT_ERRNOS = frozenset({
    errno.EAGAIN, errno.EBUSY, errno.EINTR, errno.ETIMEDOUT, errno.ESTALE,
})
MAX_IO_ATTEMPTS = 5


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, OSError) and exc.errno in TRANSIENT_ERRNOS


_io_retry = retry(
    stop=stop_after_attempt(MAX_IO_ATTEMPTS),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    retry=retry_if_exception(_is_transient),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


@_io_retry
def _write_file(path: Path, content: bytes) -> None:
    atomic_write_bytes(path, content)


@_io_retry
def _remove_file(path: Path) -> None:
    os.remove(path)


@_io_retry
def _remove_dir(path: Path) -> None:
    os.rmdir(path)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

class SyncAction(Enum):
    CREATED = "create"
    UPDATED = "update"
    UNCHANGED = "identical"
    DELETED = "delete"


@dataclass(frozen=True)
class SyncEntry:
    """One observable action on one path (relative to the output root)."""

    path: str
    action: SyncAction
    is_dir: bool = False
    duration: float = 0.0


@dataclass
class SyncReport:
    """Everything one synchronization pass did, in the order it did it."""

    entries: list[SyncEntry] = field(default_factory=list)
    elapsed: float = 0.0

    def _paths(self, action: SyncAction, is_dir: bool = False) -> list[str]:
        return [e.path for e in self.entries if e.action is action and e.is_dir is is_dir]

    @property
    def created(self) -> list[str]:
        return self._paths(SyncAction.CREATED)

    @property
    def updated(self) -> list[str]:
        return self._paths(SyncAction.UPDATED)

    @property
    def unchanged(self) -> list[str]:
        return self._paths(SyncAction.UNCHANGED)

    @property
    def deleted(self) -> list[str]:
        return self._paths(SyncAction.DELETED)

    @property
    def deleted_dirs(self) -> list[str]:
        return self._paths(SyncAction.DELETED, is_dir=True)

    @property
    def changed(self) -> int:
        """Number of actions that touched the filesystem."""
        return sum(1 for e in self.entries if e.action is not SyncAction.UNCHANGED)

    def summary(self) -> dict:
        return {
            "created": len(self.created),
            "updated": len(self.updated),
            "unchanged": len(self.unchanged),
            "deleted": len(self.deleted),
            "deleted_dirs": len(self.deleted_dirs),
            "elapsed": round(self.elapsed, 3),
        }


# ---------------------------------------------------------------------------
# ArtifactSynchronizer
# ---------------------------------------------------------------------------

class ArtifactSynchronizer:
    """Makes an output root match a desired set of pages.

    Parameters
    ----------
    output_root : str or pathlib.Path
        The directory to reconcile.  Created if missing; never removed.
    workers : int
        Number of threads for the per-page phase (``1`` runs inline).
    """

    def __init__(self, output_root, workers: int = 1):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.root = Path(output_root)
        self.workers = workers
        self._produced: set[str] = set()
        self._produced_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def synchronize(self, desired: Mapping[str, bytes]) -> SyncReport:
        """Reconcile the output root against *desired*.

        Parameters
        ----------
        desired : Mapping[str, bytes]
            Target path (POSIX, relative to the output root) -> content.

        Returns
        -------
        SyncReport

        Raises
        ------
        ValueError
            If a target path is absolute, escapes the output root, or
            names the same file as another target.  Raised before
            anything is written.
        OSError
            On the first non-transient I/O failure.
        """
        time_before = time.monotonic()
        targets = self._resolve_all(desired)

        self.root.mkdir(parents=True, exist_ok=True)
        before = self.snapshot()
        self._produced = set()

        report = SyncReport()
        report.entries.extend(self._reconcile_all(list(targets.values())))

        # Every page has been handled; only now is the produced set complete.
        orphaned = sorted(before - self._produced)
        for rel_path in orphaned:
            report.entries.append(self._delete_file(rel_path))
        report.entries.extend(self.prune_empty_dirs())

        report.elapsed = time.monotonic() - time_before
        logger.info(
            "Synchronized %s: %d created, %d updated, %d unchanged, %d deleted, "
            "%d directories removed in %.2fs",
            self.root,
            len(report.created),
            len(report.updated),
            len(report.unchanged),
            len(report.deleted),
            len(report.deleted_dirs),
            report.elapsed,
        )
        return report

    def snapshot(self) -> set[str]:
        """Return the relative paths of every non-directory entry under the root."""
        files: set[str] = set()
        if not self.root.is_dir():
            return files
        for dirpath_str, _dirnames, filenames in os.walk(self.root):
            dirpath = Path(dirpath_str)
            for fname in filenames:
                files.add((dirpath / fname).relative_to(self.root).as_posix())
        return files

    def resolve_target(self, target: str) -> str:
        """Normalise *target* to a relative POSIX path inside the root.

        Raises
        ------
        ValueError
            If *target* is empty, absolute, or contains ``..``.
        """
        pure = PurePosixPath(target.replace("\\", "/"))
        if not target or pure.is_absolute() or ".." in pure.parts or pure == PurePosixPath("."):
            raise ValueError(f"Target path {target!r} is not inside the output root")
        return pure.as_posix()

    def reconcile(self, target: str, content: bytes) -> SyncEntry:
        """Create, update or skip a single page and record it as produced."""
        time_before = time.monotonic()
        rel_path = self.resolve_target(target)
        path = self.root / rel_path

        new_digest = content_digest(content)
        old_digest = file_digest(path) if path.exists() else None
        if old_digest is None:
            action = SyncAction.CREATED
        elif old_digest != new_digest:
            action = SyncAction.UPDATED
        else:
            action = SyncAction.UNCHANGED

        if action is not SyncAction.UNCHANGED:
            _write_file(path, content)

        with self._produced_lock:
            self._produced.add(rel_path)

        entry = SyncEntry(rel_path, action, duration=time.monotonic() - time_before)
        if action is SyncAction.UNCHANGED:
            logger.debug("%12s  %s", action.value, rel_path)
        else:
            logger.info("%12s  %s", action.value, rel_path)
        return entry

    def prune_empty_dirs(self) -> list[SyncEntry]:
        """Remove empty directories under the root until none are left.

        Each pass rescans the tree.  The number of passes is bounded by the
        directory count when pruning starts, so a tree being modified
        concurrently cannot keep the loop alive.
        """
        entries: list[SyncEntry] = []
        max_passes = self._count_dirs() + 1
        for _ in range(max_passes):
            empty_dirs = self.find_empty_dirs()
            if not empty_dirs:
                break
            removed = 0
            for rel_path in empty_dirs:
                try:
                    _remove_dir(self.root / rel_path)
                except OSError as exc:
                    if exc.errno not in (errno.ENOTEMPTY, errno.EEXIST, errno.ENOENT):
                        raise
                    logger.debug("Directory %s changed while pruning, skipped", rel_path)
                    continue
                removed += 1
                entries.append(SyncEntry(rel_path, SyncAction.DELETED, is_dir=True))
                logger.info("%12s  %s/", SyncAction.DELETED.value, rel_path)
            if removed == 0:
                break
        return entries

    def find_empty_dirs(self) -> list[str]:
        """Relative paths of the directories under the root that have no entries."""
        empty: list[str] = []
        if not self.root.is_dir():
            return empty
        for dirpath_str, _dirnames, _filenames in os.walk(self.root, topdown=False):
            dirpath = Path(dirpath_str)
            if dirpath == self.root:
                continue
            if not os.listdir(dirpath):
                empty.append(dirpath.relative_to(self.root).as_posix())
        return empty

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_all(self, desired: Mapping[str, bytes]) -> dict[str, tuple[str, bytes]]:
        targets: dict[str, tuple[str, bytes]] = {}
        for target, content in desired.items():
            rel_path = self.resolve_target(target)
            if rel_path in targets:
                raise ValueError(
                    f"Targets {targets[rel_path][0]!r} and {target!r} both name {rel_path}"
                )
            targets[rel_path] = (target, content)
        return targets

    def _reconcile_all(self, items: list[tuple[str, bytes]]) -> list[SyncEntry]:
        if self.workers == 1 or len(items) < 2:
            return [self.reconcile(target, content) for target, content in items]
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="pentasync") as pool:
            return list(pool.map(lambda item: self.reconcile(*item), items))

    def _delete_file(self, rel_path: str) -> SyncEntry:
        time_before = time.monotonic()
        _remove_file(self.root / rel_path)
        logger.info("%12s  %s", SyncAction.DELETED.value, rel_path)
        return SyncEntry(rel_path, SyncAction.DELETED, duration=time.monotonic() - time_before)

    def _count_dirs(self) -> int:
        return sum(len(dirnames) for _dirpath, dirnames, _filenames in os.walk(self.root))


def synchronize(output_root, desired: Mapping[str, bytes], workers: int = 1) -> SyncReport:
    """Reconcile *output_root* against *desired*; see :class:`ArtifactSynchronizer`."""
    return ArtifactSynchronizer(output_root, workers=workers).synchronize(desired)
