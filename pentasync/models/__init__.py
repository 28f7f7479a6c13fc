"""
pentasync/models/ -- Pydantic v2 records for the schedule.

Submodules:
    base        Record / ScheduleEntity bases and the page capability interface.
    entities    Conference, ConferenceDay, Room, Track, Event, Person,
                RoleAssignment, ConferenceProfile.
    roles       EventRole / RoleState enumerations and the speaker rule.
"""

from pentasync.models.base import Record, ScheduleEntity
from pentasync.models.entities import (
    Conference,
    ConferenceDay,
    ConferenceProfile,
    Event,
    Person,
    RoleAssignment,
    Room,
    Track,
)
from pentasync.models.roles import ACTIVE_STATES, SPEAKER_ROLES, EventRole, RoleState

__all__ = [
    "ACTIVE_STATES",
    "Conference",
    "ConferenceDay",
    "ConferenceProfile",
    "Event",
    "EventRole",
    "Person",
    "Record",
    "RoleAssignment",
    "RoleState",
    "Room",
    "SPEAKER_ROLES",
    "ScheduleEntity",
    "Track",
]
