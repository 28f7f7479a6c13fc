"""
pentasync/entity_store.py -- Loads the Pentabarf cache into typed records.

The cache is a directory with one sub-directory per record kind and one
JSON document per record::

    <cache>/conf                     the Conference
    <cache>/days/*.json              ConferenceDay
    <cache>/events/*.json            Event
    <cache>/rooms/*.json             Room
    <cache>/tracks/*.json            Track
    <cache>/persons/*.json           Person
    <cache>/event_persons/*.json     RoleAssignment
    <cache>/c_persons/*.json         ConferenceProfile

Records are returned in file-name order so that repeated runs over the
same cache see the same ordering.

Usage:
    from pentasync.entity_store import EntityStore

    store = EntityStore("tmp/pentacache")
    rooms = store.load("rooms")
    context = store.load_all()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from pentasync.models import (
    Conference,
    ConferenceDay,
    ConferenceProfile,
    Event,
    Person,
    Record,
    RoleAssignment,
    Room,
    Track,
)
from pentasync.utils import read_json_strict

logger = logging.getLogger(__name__)

# kind -> (cache sub-directory, record model)
KINDS: dict[str, tuple[str, type[Record]]] = {
    "days": ("days", ConferenceDay),
    "events": ("events", Event),
    "rooms": ("rooms", Room),
    "tracks": ("tracks", Track),
    "persons": ("persons", Person),
    "role_assignments": ("event_persons", RoleAssignment),
    "profiles": ("c_persons", ConferenceProfile),
}

CONFERENCE_FILE = "conf"


class CacheError(ValueError):
    """Raised when the cache cannot be read or a document cannot be parsed into its record type."""


@dataclass(frozen=True)
class ScheduleContext:
    """Every record loaded for one run, held read-only for the run's duration."""

    conference: Conference | None = None
    days: tuple[ConferenceDay, ...] = ()
    events: tuple[Event, ...] = ()
    rooms: tuple[Room, ...] = ()
    tracks: tuple[Track, ...] = ()
    persons: tuple[Person, ...] = ()
    role_assignments: tuple[RoleAssignment, ...] = ()
    profiles: tuple[ConferenceProfile, ...] = ()


class EntityStore:
    """Read-only access to a Pentabarf cache directory.

    Parameters
    ----------
    cache_dir : str or pathlib.Path
        Root of the cache.
    """

    def __init__(self, cache_dir):
        self.root = Path(cache_dir)

    def load(self, kind: str) -> tuple[Record, ...]:
        """Load every record of *kind* (a key of :data:`KINDS`).

        A missing kind directory yields an empty tuple.

        Raises
        ------
        KeyError
            If *kind* is unknown.
        CacheError
            If the directory cannot be listed, or a document is not valid
            JSON or fails validation.
        """
        if kind not in KINDS:
            raise KeyError(f"Unknown record kind: {kind}")
        subdir, model = KINDS[kind]
        directory = self.root / subdir
        if not directory.is_dir():
            logger.warning("Cache directory %s does not exist, no %s loaded", directory, kind)
            return ()

        try:
            paths = sorted(p for p in directory.iterdir() if p.is_file() and not p.name.startswith("."))
        except OSError as exc:
            raise CacheError(f"Could not list cache directory {directory}: {exc}") from exc
        return tuple(self._load_record(path, model) for path in paths)

    def load_conference(self) -> Conference | None:
        """Load the conference document, or ``None`` if the cache has none."""
        path = self.root / CONFERENCE_FILE
        if not path.is_file():
            path = self.root / f"{CONFERENCE_FILE}.json"
            if not path.is_file():
                return None
        return self._load_record(path, Conference)

    def load_all(self) -> ScheduleContext:
        """Load the whole cache into a :class:`ScheduleContext`."""
        time_before = time.monotonic()
        context = ScheduleContext(
            conference=self.load_conference(),
            **{kind: self.load(kind) for kind in KINDS},
        )
        logger.info(
            "Loaded cache from %s in %.2fs: %d events, %d rooms, %d tracks, %d persons",
            self.root,
            time.monotonic() - time_before,
            len(context.events),
            len(context.rooms),
            len(context.tracks),
            len(context.persons),
        )
        return context

    @staticmethod
    def _load_record(path: Path, model: type[Record]) -> Record:
        try:
            data = read_json_strict(path)
        except (ValueError, OSError) as exc:
            raise CacheError(f"Could not read cache document {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CacheError(f"Cache document {path} is not a JSON object")
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise CacheError(
                f"Cache document {path} is not a valid {model.__name__}: {exc}"
            ) from exc
