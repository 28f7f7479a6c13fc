"""
pentasync/models/entities.py -- The schedule records.

Field names are Pythonic; the Pentabarf column names found in the cache
are accepted as validation aliases (e.g. ``conference_room_id`` for
``Event.room_id``).
"""

from __future__ import annotations

import datetime

from pydantic import AliasChoices, Field

from pentasync.models.base import EntityId, OptionalEntityId, Record, ScheduleEntity
from pentasync.models.roles import EventRole, RoleState, is_speaking_role


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class Conference(Record):
    """Conference-wide metadata, made available to every page."""

    conference_id: EntityId
    title: str = ""
    acronym: str = ""
    subtitle: str | None = None
    venue: str | None = None
    city: str | None = None


class ConferenceDay(ScheduleEntity):
    key_field = "day_id"
    kind = "day"
    url_prefix = "/schedule/day/"

    day_id: EntityId = Field(validation_alias=_alias("day_id", "conference_day_id"))
    name: str = ""
    date: datetime.date | None = Field(default=None, validation_alias=_alias("date", "conference_day"))

    @property
    def display_name(self) -> str:
        return self.name


class Room(ScheduleEntity):
    key_field = "room_id"
    kind = "room"
    url_prefix = "/schedule/room/"

    room_id: EntityId = Field(validation_alias=_alias("room_id", "conference_room_id"))
    name: str = Field(default="", validation_alias=_alias("name", "conference_room"))
    slug: str | None = None
    rank: int | None = None

    @property
    def display_name(self) -> str:
        return self.name


class Track(ScheduleEntity):
    key_field = "track_id"
    kind = "track"
    url_prefix = "/schedule/track/"

    track_id: EntityId = Field(validation_alias=_alias("track_id", "conference_track_id"))
    name: str = Field(default="", validation_alias=_alias("name", "conference_track"))
    slug: str | None = None
    rank: int | None = None

    @property
    def display_name(self) -> str:
        return self.name


class Event(ScheduleEntity):
    """A scheduled event (Pentabarf's ``view_schedule_event`` row)."""

    key_field = "event_id"
    kind = "event"
    url_prefix = "/schedule/event/"

    event_id: EntityId
    title: str = ""
    subtitle: str | None = None
    slug: str | None = None
    room_id: OptionalEntityId = Field(
        default=None, validation_alias=_alias("room_id", "conference_room_id"),
    )
    track_id: OptionalEntityId = Field(
        default=None, validation_alias=_alias("track_id", "conference_track_id"),
    )
    day_id: OptionalEntityId = Field(
        default=None, validation_alias=_alias("day_id", "conference_day_id"),
    )
    start_time: str | None = None
    duration: str | None = None
    language: str | None = None
    event_type: str | None = None
    abstract: str | None = None
    description: str | None = None

    @property
    def display_name(self) -> str:
        return self.title


class Person(ScheduleEntity):
    key_field = "person_id"
    kind = "speaker"
    url_prefix = "/schedule/speaker/"

    person_id: EntityId
    first_name: str | None = None
    last_name: str | None = None
    public_name: str | None = None
    slug: str | None = None

    @property
    def display_name(self) -> str:
        """The public name when the full name is incomplete, otherwise "first last"."""
        if (not self.first_name or not self.last_name) and self.public_name:
            return self.public_name
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class RoleAssignment(Record):
    """A person's role on an event (Pentabarf ``event_person``)."""

    event_id: EntityId
    person_id: EntityId
    role: str | None = Field(default=None, validation_alias=_alias("role", "event_role"))
    role_state: str | None = Field(default=None, validation_alias=_alias("role_state", "event_role_state"))
    remark: str | None = None

    @property
    def event_role(self) -> EventRole | None:
        return EventRole.parse(self.role)

    @property
    def event_role_state(self) -> RoleState | None:
        return RoleState.parse(self.role_state)

    @property
    def is_speaking(self) -> bool:
        return is_speaking_role(self.role, self.role_state)


class ConferenceProfile(Record):
    """Per-conference bio and contact details (Pentabarf ``conference_person``)."""

    person_id: EntityId
    title: str | None = None
    email: str | None = None
    abstract: str | None = None
    description: str | None = None
    website: str | None = Field(default=None, validation_alias=_alias("website", "url"))
