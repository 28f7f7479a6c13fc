"""
pentasync/pages.py -- Computes the desired set of schedule pages.

Maps every page the schedule needs to its target path (relative to the
output root, POSIX separators) and its rendered content:

    <listing>.html          one per listing template (events, rooms, ...)
    speaker/<slug>.html     one per speaker
    event/<slug>.html       one per event
    track/<slug>.html       one per track
    room/<slug>.html        one per room

All pages are rendered before anything is written, so a template or slug
failure aborts the run with the output tree untouched.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pentasync.index_builder import ScheduleIndex
from pentasync.models import ScheduleEntity
from pentasync.renderer import TEMPLATE_SUFFIX, PageRenderer, RenderError
from pentasync.slugs import slug_of

logger = logging.getLogger(__name__)


def page_path(entity: ScheduleEntity) -> str:
    """Return the target path of *entity*'s page, e.g. ``room/hall_a.html``."""
    return f"{entity.kind}/{slug_of(entity)}{TEMPLATE_SUFFIX}"


class _PagePlan:
    """Accumulates rendered pages and rejects two pages sharing a path."""

    def __init__(self, renderer: PageRenderer, conference: Any):
        self.renderer = renderer
        self.conference = conference
        self.pages: dict[str, bytes] = {}
        self._owners: dict[str, str] = {}

    def add(self, template: str, target: str, owner: str, **bindings: Any) -> None:
        if target in self.pages:
            raise RenderError(
                template,
                f"{owner} and {self._owners[target]} both render to {target}",
            )
        bindings.setdefault("conference", self.conference)
        self.pages[target] = self.renderer.render(template, bindings)
        self._owners[target] = owner


def plan_pages(index: ScheduleIndex, renderer: PageRenderer) -> dict[str, bytes]:
    """Render every schedule page and return ``{target_path: content}``.

    Raises
    ------
    RenderError
        If a template is missing or fails, or two pages share a target path.
    SlugError
        If an entity has nothing to build its slug from.
    """
    time_before = time.monotonic()
    context = index.context
    plan = _PagePlan(renderer, context.conference)

    for template in renderer.listing_templates():
        plan.add(
            template,
            f"{template}{TEMPLATE_SUFFIX}",
            f"listing {template}",
            days=context.days,
            events=context.events,
            rooms=context.rooms,
            tracks=context.tracks,
            speakers=index.speakers,
            index=index,
        )

    for person in index.speakers:
        plan.add(
            "speaker",
            page_path(person),
            str(person),
            p=person,
            cp=index.speaker_profile(person.person_id),
            events=index.events_by_speaker[person.person_id],
        )

    for event in context.events:
        plan.add(
            "event",
            page_path(event),
            str(event),
            e=event,
            speakers=index.speakers_by_event[event.event_id],
            profiles=index.profiles_by_event(event.event_id),
            room=index.room_by_id.get(event.room_id) if event.room_id else None,
            track=index.track_by_id.get(event.track_id) if event.track_id else None,
            day=index.day_by_id.get(event.day_id) if event.day_id else None,
        )

    for track in context.tracks:
        plan.add("track", page_path(track), str(track), t=track, events=index.events_by_track[track.track_id])

    for room in context.rooms:
        plan.add("room", page_path(room), str(room), r=room, events=index.events_by_room[room.room_id])

    logger.info("Rendered %d pages in %.2fs", len(plan.pages), time.monotonic() - time_before)
    return plan.pages
