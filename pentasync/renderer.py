"""
pentasync/renderer.py -- Jinja2 renderer for schedule pages.

Templates are looked up by logical name (``"event"`` -> ``event.html``)
in a single templates directory.  Every template can use the page
helpers:

    markup(text)     Markdown to HTML, raw HTML in the source filtered out
    slug(o)          path-safe slug of a room/track/event/person/day
    name(o)          display name
    url(o)           canonical site path
    link(o)          <a href="url">name</a>; a sequence becomes a
                     comma-separated list of links
    ident(o)         identity key (the record's id)
    yaml_safe(s)     scalar safe to place in a page's metadata header

Undefined bindings raise instead of rendering as empty strings, so a
template that expects a value the caller did not bind fails the run.

Usage:
    from pentasync.renderer import PageRenderer

    renderer = PageRenderer("templates")
    content = renderer.render("room", {"r": room, "events": events})
"""

from __future__ import annotations

import logging
from importlib.resources import files
from pathlib import Path
from typing import Any, Mapping

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)
from markdown_it import MarkdownIt
from markupsafe import Markup

from pentasync.slugs import slug_of, url_of

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".html"

_md = MarkdownIt("commonmark", {"html": False})


class RenderError(RuntimeError):
    """A template could not be found or failed while rendering."""

    def __init__(self, template_name: str, message: str):
        self.template_name = template_name
        super().__init__(f"{template_name}: {message}")


def default_templates_dir() -> Path:
    """Return the directory of the templates shipped with pentasync."""
    return Path(str(files("pentasync").joinpath("templates")))


# ---------------------------------------------------------------------------
# Page helpers
# ---------------------------------------------------------------------------

def markup(text: str | None) -> Markup:
    """Render Markdown *text* to HTML; ``None`` renders as nothing."""
    if not text:
        return Markup("")
    return Markup(_md.render(text).strip())


def name(o: Any) -> str:
    return o.display_name


def ident(o: Any) -> str:
    return o.identity_key


def link(o: Any) -> Markup:
    if isinstance(o, (list, tuple)):
        return Markup(", ").join(link(item) for item in o)
    return Markup('<a href="{}">{}</a>').format(url_of(o), name(o))


def yaml_safe(value: Any) -> str:
    """Quote *value* for a YAML metadata header when it contains a colon."""
    text = "" if value is None else str(value)
    if ":" in text:
        return "'" + text.replace("'", "''") + "'"
    return text


PAGE_HELPERS = {
    "markup": markup,
    "slug": slug_of,
    "name": name,
    "url": url_of,
    "link": link,
    "ident": ident,
    "yaml_safe": yaml_safe,
}


# ---------------------------------------------------------------------------
# PageRenderer
# ---------------------------------------------------------------------------

class PageRenderer:
    """Renders named templates with a mapping of bindings.

    Parameters
    ----------
    templates_dir : str or pathlib.Path, optional
        Directory containing ``<name>.html`` templates.  Defaults to the
        templates packaged with pentasync.
    """

    def __init__(self, templates_dir=None):
        self.templates_dir = Path(templates_dir) if templates_dir else default_templates_dir()
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.env.globals.update(PAGE_HELPERS)
        self.env.filters.update(PAGE_HELPERS)

    def render(self, template_name: str, bindings: Mapping[str, Any]) -> bytes:
        """Render *template_name* with *bindings* and return UTF-8 bytes.

        Raises
        ------
        RenderError
            If the template does not exist, uses an unbound name, or
            raises while rendering.
        """
        filename = f"{template_name}{TEMPLATE_SUFFIX}"
        try:
            template = self.env.get_template(filename)
        except TemplateNotFound:
            raise RenderError(
                template_name, f"template {filename} not found in {self.templates_dir}"
            ) from None
        except TemplateError as exc:
            raise RenderError(template_name, str(exc)) from exc

        try:
            output = template.render(**bindings)
        except TemplateError as exc:
            raise RenderError(template_name, str(exc)) from exc
        except Exception as exc:
            raise RenderError(template_name, f"{type(exc).__name__}: {exc}") from exc
        return output.encode("utf-8")

    def listing_templates(self) -> list[str]:
        """Logical names of the top-level listing templates (``events``, ``rooms``, ...).

        A listing template is any template whose name ends in ``s``.
        """
        if not self.templates_dir.is_dir():
            return []
        return sorted(
            path.stem
            for path in self.templates_dir.iterdir()
            if path.is_file() and path.suffix == TEMPLATE_SUFFIX and path.stem.endswith("s")
        )
