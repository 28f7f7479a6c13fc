"""
Shared pytest fixtures for the pentasync test suite.

Provides:
    - sample_records: raw cache documents for a one-event conference
    - sample_context: the same data as a ScheduleContext
    - write_cache: writes raw cache documents into a cache directory
    - cache_dir: a cache directory holding sample_records
    - templates_dir: minimal page templates (no listing templates)
"""

import json
import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure pentasync/ is importable regardless of where pytest is invoked
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pentasync.entity_store import KINDS, ScheduleContext  # noqa: E402
from pentasync.models import (  # noqa: E402
    Conference,
    ConferenceProfile,
    Event,
    Person,
    RoleAssignment,
    Room,
    Track,
)


MINIMAL_TEMPLATES = {
    "room.html": "room {{ ident(r) }} {{ name(r) }}: {% for e in events %}{{ ident(e) }} {% endfor %}\n",
    "track.html": "track {{ ident(t) }} {{ name(t) }}: {% for e in events %}{{ ident(e) }} {% endfor %}\n",
    "event.html": "event {{ ident(e) }} {{ e.title }}: {% for p in speakers %}{{ name(p) }} {% endfor %}\n",
    "speaker.html": "speaker {{ ident(p) }} {{ name(p) }}: {% for e in events %}{{ e.title }} {% endfor %}\n",
}


@pytest.fixture
def sample_records():
    """Raw cache documents, keyed by record kind, using Pentabarf column names."""
    return {
        "conference": {"conference_id": 7, "title": "Example Conference", "acronym": "excon"},
        "rooms": [{"conference_room_id": "R1", "conference_room": "Hall A"}],
        "tracks": [{"conference_track_id": "T1", "conference_track": "Security"}],
        "days": [{"conference_day_id": "D1", "name": "Saturday", "conference_day": "2026-02-07"}],
        "events": [
            {
                "event_id": "E1",
                "title": "Talk",
                "conference_room_id": "R1",
                "conference_track_id": "T1",
                "conference_day_id": "D1",
                "abstract": "An *important* talk.",
                "unknown_column": "dropped",
            },
        ],
        "persons": [{"person_id": "P1", "first_name": "Jane", "last_name": "Doe"}],
        "role_assignments": [
            {"event_id": "E1", "person_id": "P1", "event_role": "speaker", "event_role_state": "confirmed"},
        ],
        "profiles": [{"person_id": "P1", "title": "Researcher", "abstract": "Jane breaks things."}],
    }


@pytest.fixture
def sample_context():
    """A ScheduleContext for the one-room, one-track, one-event, one-speaker schedule."""
    return ScheduleContext(
        conference=Conference(conference_id="7", title="Example Conference"),
        rooms=(Room(room_id="R1", name="Hall A"),),
        tracks=(Track(track_id="T1", name="Security"),),
        events=(Event(event_id="E1", title="Talk", room_id="R1", track_id="T1"),),
        persons=(Person(person_id="P1", first_name="Jane", last_name="Doe"),),
        role_assignments=(
            RoleAssignment(event_id="E1", person_id="P1", role="speaker", role_state="confirmed"),
        ),
        profiles=(ConferenceProfile(person_id="P1", title="Researcher"),),
    )


@pytest.fixture
def write_cache():
    """Return a helper that writes raw cache documents under a directory."""

    def _write(cache_root: Path, records: dict) -> Path:
        cache_root.mkdir(parents=True, exist_ok=True)
        conference = records.get("conference")
        if conference is not None:
            (cache_root / "conf").write_text(json.dumps(conference), encoding="utf-8")
        for kind, (subdir, _model) in KINDS.items():
            directory = cache_root / subdir
            directory.mkdir(exist_ok=True)
            for i, doc in enumerate(records.get(kind, [])):
                (directory / f"{i:04d}.json").write_text(json.dumps(doc), encoding="utf-8")
        return cache_root

    return _write


@pytest.fixture
def cache_dir(tmp_path, write_cache, sample_records):
    """A cache directory holding the sample records."""
    return write_cache(tmp_path / "cache", sample_records)


@pytest.fixture
def templates_dir(tmp_path):
    """A templates directory with one template per page kind and no listings."""
    directory = tmp_path / "templates"
    directory.mkdir()
    for filename, source in MINIMAL_TEMPLATES.items():
        (directory / filename).write_text(source, encoding="utf-8")
    return directory
