"""
pentasync/index_builder.py -- Relational index over the loaded schedule.

Turns the independently loaded record collections of a
:class:`~pentasync.entity_store.ScheduleContext` into a consistent,
read-only index:

    - ID lookups for rooms, events, tracks, persons, days and profiles
    - events per room and per track (pre-seeded, so every known id maps
      to a sequence even when it has no events)
    - role assignments per event
    - speakers per event and events per speaker, derived from the role
      assignments whose role is a speaking role in an active state

Every foreign key is checked while indexing.  A reference to a room,
track, event or person that does not exist raises
:class:`ScheduleIntegrityError` and no index is produced.

Alongside the lookup tables the index carries a NetworkX directed graph
of the same relationships (event -> room, event -> track,
person -> event) used for statistics.

Usage:
    from pentasync.index_builder import build_index

    index = build_index(store.load_all())
    index.events_by_room["R1"]        # (Event, ...)
    index.speakers_by_event["E1"]     # (Person, ...)
    index.stats()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

import networkx as nx

from pentasync.entity_store import ScheduleContext
from pentasync.models import (
    ConferenceDay,
    ConferenceProfile,
    Event,
    Person,
    RoleAssignment,
    Room,
    Track,
)

logger = logging.getLogger(__name__)


class ScheduleIntegrityError(ValueError):
    """A record references another record that does not exist."""

    def __init__(self, entity_kind: str, entity_id: str, reference_kind: str, reference_id: str):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        self.reference_kind = reference_kind
        self.reference_id = reference_id
        super().__init__(
            f"{entity_kind} {entity_id} references {reference_kind} "
            f"{reference_id} that doesn't exist"
        )


def _by_id(records: Iterable, attr: str) -> dict:
    result = {}
    for record in records:
        key = getattr(record, attr)
        if key in result:
            logger.warning("Duplicate %s %s in cache, keeping the last one", attr, key)
        result[key] = record
    return result


def _seeded(keys: Iterable[str]) -> dict[str, list]:
    return {key: [] for key in keys}


def _freeze(table: dict[str, list]) -> Mapping[str, tuple]:
    return MappingProxyType({key: tuple(values) for key, values in table.items()})


@dataclass(frozen=True)
class ScheduleIndex:
    """Read-only lookups and derived relationships for one run."""

    context: ScheduleContext
    room_by_id: Mapping[str, Room]
    event_by_id: Mapping[str, Event]
    track_by_id: Mapping[str, Track]
    person_by_id: Mapping[str, Person]
    day_by_id: Mapping[str, ConferenceDay]
    profile_by_person_id: Mapping[str, ConferenceProfile]
    events_by_room: Mapping[str, tuple[Event, ...]]
    events_by_track: Mapping[str, tuple[Event, ...]]
    assignments_by_event: Mapping[str, tuple[RoleAssignment, ...]]
    speakers_by_event: Mapping[str, tuple[Person, ...]]
    events_by_speaker: Mapping[str, tuple[Event, ...]]
    speakers: tuple[Person, ...]
    graph: nx.DiGraph = field(repr=False, compare=False)

    def by_id(self, kind: str) -> Mapping:
        """Return the ID lookup for *kind* (``"room"``, ``"event"``, ...)."""
        tables = {
            "room": self.room_by_id,
            "event": self.event_by_id,
            "track": self.track_by_id,
            "person": self.person_by_id,
            "day": self.day_by_id,
            "profile": self.profile_by_person_id,
        }
        try:
            return tables[kind]
        except KeyError:
            raise KeyError(f"Unknown entity kind: {kind}") from None

    def speaker_profile(self, person_id: str) -> ConferenceProfile | None:
        return self.profile_by_person_id.get(person_id)

    def profiles_by_event(self, event_id: str) -> tuple[ConferenceProfile, ...]:
        """Profiles of the event's speakers; speakers without one are skipped."""
        return tuple(
            profile
            for profile in (
                self.profile_by_person_id.get(person.person_id)
                for person in self.speakers_by_event.get(event_id, ())
            )
            if profile is not None
        )

    def stats(self) -> dict:
        """Return summary statistics about the schedule graph.

        Returns
        -------
        dict
            Keys: ``node_count``, ``edge_count``, ``speaker_count``,
            ``component_count``, ``empty_rooms``, ``empty_tracks``.
        """
        component_count = (
            nx.number_weakly_connected_components(self.graph)
            if self.graph.number_of_nodes() > 0 else 0
        )
        return {
            "node_count": self.graph.number_of_nodes(),
            "edge_count": self.graph.number_of_edges(),
            "speaker_count": len(self.speakers),
            "component_count": component_count,
            "empty_rooms": sorted(rid for rid, events in self.events_by_room.items() if not events),
            "empty_tracks": sorted(tid for tid, events in self.events_by_track.items() if not events),
        }


def build_index(context: ScheduleContext) -> ScheduleIndex:
    """Build the :class:`ScheduleIndex` for *context*.

    Raises
    ------
    ScheduleIntegrityError
        If an event names an unknown room or track, or a role assignment
        names an unknown event or person.
    """
    time_before = time.monotonic()

    room_by_id = _by_id(context.rooms, "room_id")
    event_by_id = _by_id(context.events, "event_id")
    track_by_id = _by_id(context.tracks, "track_id")
    person_by_id = _by_id(context.persons, "person_id")
    day_by_id = _by_id(context.days, "day_id")
    profile_by_person_id = _by_id(context.profiles, "person_id")

    # Pass 1: events per room / track
    events_by_room = _seeded(room_by_id)
    events_by_track = _seeded(track_by_id)
    for event in context.events:
        if event.room_id is not None:
            if event.room_id not in events_by_room:
                raise ScheduleIntegrityError("event", event.event_id, "room", event.room_id)
            events_by_room[event.room_id].append(event)
        if event.track_id is not None:
            if event.track_id not in events_by_track:
                raise ScheduleIntegrityError("event", event.event_id, "track", event.track_id)
            events_by_track[event.track_id].append(event)

    # Pass 2: role assignments per event
    assignments_by_event = _seeded(event_by_id)
    for assignment in context.role_assignments:
        if assignment.event_id not in assignments_by_event:
            raise ScheduleIntegrityError(
                "role assignment", f"{assignment.event_id}/{assignment.person_id}",
                "event", assignment.event_id,
            )
        if assignment.person_id not in person_by_id:
            raise ScheduleIntegrityError(
                "role assignment", f"{assignment.event_id}/{assignment.person_id}",
                "person", assignment.person_id,
            )
        assignments_by_event[assignment.event_id].append(assignment)

    # Pass 3: speakers, filtered by role and role state
    speakers_by_event = _seeded(event_by_id)
    events_by_speaker = _seeded(person_by_id)
    speakers: dict[str, Person] = {}
    for event in context.events:
        seen: set[str] = set()
        for assignment in assignments_by_event[event.event_id]:
            if not assignment.is_speaking or assignment.person_id in seen:
                continue
            seen.add(assignment.person_id)
            person = person_by_id[assignment.person_id]
            speakers_by_event[event.event_id].append(person)
            events_by_speaker[person.person_id].append(event)
            speakers.setdefault(person.person_id, person)

    graph = _build_graph(context, assignments_by_event)

    index = ScheduleIndex(
        context=context,
        room_by_id=MappingProxyType(room_by_id),
        event_by_id=MappingProxyType(event_by_id),
        track_by_id=MappingProxyType(track_by_id),
        person_by_id=MappingProxyType(person_by_id),
        day_by_id=MappingProxyType(day_by_id),
        profile_by_person_id=MappingProxyType(profile_by_person_id),
        events_by_room=_freeze(events_by_room),
        events_by_track=_freeze(events_by_track),
        assignments_by_event=_freeze(assignments_by_event),
        speakers_by_event=_freeze(speakers_by_event),
        events_by_speaker=_freeze(events_by_speaker),
        speakers=tuple(speakers.values()),
        graph=graph,
    )
    logger.info(
        "Indexed schedule in %.2fs: %d speakers across %d events",
        time.monotonic() - time_before,
        len(index.speakers),
        len(event_by_id),
    )
    return index


def _build_graph(
    context: ScheduleContext,
    assignments_by_event: dict[str, list[RoleAssignment]],
) -> nx.DiGraph:
    """Build the relationship graph.  Node ids are ``"<kind>:<id>"``."""
    graph = nx.DiGraph()
    for entity in (*context.rooms, *context.tracks, *context.events, *context.persons):
        graph.add_node(
            f"{entity.kind}:{entity.identity_key}",
            kind=entity.kind,
            name=entity.display_name,
        )

    for event in context.events:
        node = f"event:{event.event_id}"
        if event.room_id is not None:
            graph.add_edge(node, f"room:{event.room_id}", relationship_type="held_in")
        if event.track_id is not None:
            graph.add_edge(node, f"track:{event.track_id}", relationship_type="part_of")
        for assignment in assignments_by_event[event.event_id]:
            graph.add_edge(
                f"speaker:{assignment.person_id}",
                node,
                relationship_type=assignment.role or "",
                role_state=assignment.role_state or "",
            )
    return graph
