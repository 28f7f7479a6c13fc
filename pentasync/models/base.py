"""
pentasync/models/base.py -- Shared base for the schedule records.

Every record is a frozen pydantic model.  Unknown cache fields are
dropped at validation time (``extra='ignore'``) so the core only ever
sees the named fields declared on each record.

Records that get their own page (Room, Track, Event, Person,
ConferenceDay) derive from :class:`ScheduleEntity`, which provides the
page capability interface: ``display_name``, ``identity_key`` and
``canonical_path()``.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict

from pentasync.slugs import slug_of


def _coerce_id(value: Any) -> Any:
    """Pentabarf ids arrive as integers; the core keys everything by string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return value


def _coerce_optional_id(value: Any) -> Any:
    if value in ("", None):
        return None
    return _coerce_id(value)


EntityId = Annotated[str, BeforeValidator(_coerce_id)]
OptionalEntityId = Annotated[str | None, BeforeValidator(_coerce_optional_id)]


class Record(BaseModel):
    """Immutable typed record loaded from the cache."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class ScheduleEntity(Record):
    """A record that is published as a page of its own.

    Subclasses declare:

    ``key_field``
        Name of the attribute holding the entity's id.
    ``kind``
        Output directory name for the entity's pages (``"room"``, ...).
    ``url_prefix``
        Site path under which the entity's page is linked.
    """

    key_field: ClassVar[str] = ""
    kind: ClassVar[str] = ""
    url_prefix: ClassVar[str] = ""

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    @property
    def identity_key(self) -> str:
        return getattr(self, self.key_field)

    def canonical_path(self) -> str:
        """Return the site path of this entity's page, e.g. ``/schedule/room/hall_a``."""
        return self.url_prefix + slug_of(self)

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.identity_key})"
