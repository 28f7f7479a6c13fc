"""
pentasync/models/roles.py -- Event roles and role states.

Pentabarf stores a person's role on an event, and the state of that role,
as free text.  Both are parsed into closed enumerations here.  Values that
do not match a known member parse to ``None``; such assignments are never
treated as speaking roles but are otherwise kept.
"""

from __future__ import annotations

from enum import Enum


class EventRole(Enum):
    ATTENDEE = "attendee"
    COORDINATOR = "coordinator"
    MODERATOR = "moderator"
    REPORTER = "reporter"
    SPEAKER = "speaker"
    VISITOR = "visitor"

    @classmethod
    def parse(cls, value: str | None) -> EventRole | None:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class RoleState(Enum):
    CANCELED = "canceled"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    IDEA = "idea"
    OFFER = "offer"
    REJECTED = "rejected"
    UNCLEAR = "unclear"

    @classmethod
    def parse(cls, value: str | None) -> RoleState | None:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# Roles that put a person on an event's speaker list, and the role states
# under which that role counts.
SPEAKER_ROLES = frozenset({EventRole.COORDINATOR, EventRole.MODERATOR, EventRole.SPEAKER})
ACTIVE_STATES = frozenset({RoleState.CONFIRMED, RoleState.OFFER})


def is_speaking_role(role: str | None, state: str | None) -> bool:
    """Return True if *role* in *state* makes the person a speaker."""
    return (
        EventRole.parse(role) in SPEAKER_ROLES
        and RoleState.parse(state) in ACTIVE_STATES
    )
