"""
pentasync/slugs.py -- Path-safe names for schedule pages.

Slugs name the output files and the links between pages, so they must be
stable across runs for unchanged input.

Examples:
    "Hall A"               -> "hall_a"
    "Jürgen Müller-Lüdenscheidt" -> "jurgen_muller_ludenscheidt"
    "Intro to v2.0"        -> "intro_to_v20"
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any

FALLBACK_SLUG = "untitled"


class SlugError(ValueError):
    """Raised when an entity offers nothing to build a slug from."""


def slugify(text: str, fallback: str = FALLBACK_SLUG) -> str:
    """Convert a human-readable name to a path-safe slug.

    Returns *fallback* when nothing of *text* survives (e.g. a title written
    entirely in a non-Latin script).
    """
    # Normalize unicode characters to ASCII equivalents where possible
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower().replace(".", "")
    text = re.sub(r"[\s\-]+", "_", text)
    text = re.sub(r"[^a-z0-9_]", "", text)
    text = re.sub(r"_+", "_", text).strip("_")
    return text or fallback


def slug_of(entity: Any) -> str:
    """Return the slug for *entity*.

    Uses the entity's own ``slug`` when it carries one, otherwise its
    display name.  When neither yields a usable slug, the entity's kind and
    id are used instead (``event_e1``), so such pages stay distinct.

    Raises
    ------
    SlugError
        If neither a slug nor a display name is available.
    """
    source = getattr(entity, "slug", None)
    if not source:
        source = getattr(entity, "display_name", None)
    if not source or not source.strip():
        raise SlugError(f"cannot derive a slug for {entity}: no slug and no name")
    kind = getattr(entity, "kind", "")
    key = getattr(entity, "identity_key", "")
    return slugify(source, fallback=slugify(f"{kind}_{key}"))


def url_of(entity: Any) -> str:
    """Return the site path of *entity*'s page."""
    return entity.canonical_path()
