"""Tests for pentasync/pages.py -- computing the desired page set."""

import pytest

from pentasync.entity_store import ScheduleContext
from pentasync.index_builder import build_index
from pentasync.models import Event, Room
from pentasync.pages import page_path, plan_pages
from pentasync.renderer import PageRenderer, RenderError
from pentasync.slugs import SlugError


class TestPagePath:
    def test_page_path_per_kind(self, sample_context):
        assert page_path(sample_context.rooms[0]) == "room/hall_a.html"
        assert page_path(sample_context.tracks[0]) == "track/security.html"
        assert page_path(sample_context.events[0]) == "event/talk.html"
        assert page_path(sample_context.persons[0]) == "speaker/jane_doe.html"


class TestPlanPages:
    def test_scenario_produces_four_pages(self, sample_context, templates_dir):
        pages = plan_pages(build_index(sample_context), PageRenderer(templates_dir))
        assert set(pages) == {
            "room/hall_a.html",
            "track/security.html",
            "event/talk.html",
            "speaker/jane_doe.html",
        }
        assert pages["room/hall_a.html"] == b"room R1 Hall A: E1 \n"
        assert pages["event/talk.html"] == b"event E1 Talk: Jane Doe \n"
        assert pages["speaker/jane_doe.html"] == b"speaker P1 Jane Doe: Talk \n"

    def test_listing_templates_are_rendered(self, sample_context, templates_dir):
        (templates_dir / "rooms.html").write_text(
            "{{ conference.title }}: {% for r in rooms %}{{ name(r) }}{% endfor %}", encoding="utf-8"
        )
        pages = plan_pages(build_index(sample_context), PageRenderer(templates_dir))
        assert pages["rooms.html"] == b"Example Conference: Hall A"

    def test_non_speakers_get_no_page(self, sample_context, templates_dir):
        context = ScheduleContext(
            events=sample_context.events,
            rooms=sample_context.rooms,
            tracks=sample_context.tracks,
            persons=sample_context.persons,
            role_assignments=(),
        )
        pages = plan_pages(build_index(context), PageRenderer(templates_dir))
        assert not any(path.startswith("speaker/") for path in pages)

    def test_colliding_slugs_are_rejected(self, templates_dir):
        context = ScheduleContext(
            events=(Event(event_id="E1", title="Keynote"), Event(event_id="E2", title="Keynote")),
        )
        with pytest.raises(RenderError, match="event/keynote.html"):
            plan_pages(build_index(context), PageRenderer(templates_dir))

    def test_non_latin_titles_get_separate_pages(self, templates_dir):
        context = ScheduleContext(
            events=(Event(event_id="E1", title="日本語"), Event(event_id="E2", title="中文讲座")),
        )
        pages = plan_pages(build_index(context), PageRenderer(templates_dir))
        assert set(pages) == {"event/event_e1.html", "event/event_e2.html"}

    def test_unnamed_room_fails(self, templates_dir):
        context = ScheduleContext(rooms=(Room(room_id="R1"),))
        with pytest.raises(SlugError):
            plan_pages(build_index(context), PageRenderer(templates_dir))

    def test_output_is_stable(self, sample_context, templates_dir):
        renderer = PageRenderer(templates_dir)
        first = plan_pages(build_index(sample_context), renderer)
        second = plan_pages(build_index(sample_context), renderer)
        assert first == second
        assert list(first) == list(second)

    def test_default_templates(self, sample_context):
        pages = plan_pages(build_index(sample_context), PageRenderer())
        assert {"events.html", "rooms.html", "speakers.html", "tracks.html"} <= set(pages)
        assert len(pages) == 8
