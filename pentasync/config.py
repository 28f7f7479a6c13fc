"""
pentasync/config.py -- Publish settings.

Settings are read from a JSON document.  They may sit under a
``"pentabarf"`` key (so the schedule settings can share a site config
file) or at the top level::

    {
      "pentabarf": {
        "conference_id": 42,
        "cache": "tmp/pentacache",
        "outdir": "content/schedule",
        "templates": "templates",
        "workers": 4
      }
    }

Relative paths are resolved against the directory holding the config file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from pentasync.models.base import OptionalEntityId
from pentasync.utils import read_json_strict

logger = logging.getLogger(__name__)

CONFIG_SECTION = "pentabarf"
DEFAULT_CACHE_DIR = Path("tmp") / "pentacache"
DEFAULT_OUTPUT_DIR = Path("content") / "schedule"


class PublishConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cache_dir: Path = Field(
        default=DEFAULT_CACHE_DIR, validation_alias=AliasChoices("cache_dir", "cache"),
    )
    output_dir: Path = Field(
        default=DEFAULT_OUTPUT_DIR, validation_alias=AliasChoices("output_dir", "outdir"),
    )
    templates_dir: Path | None = Field(
        default=None, validation_alias=AliasChoices("templates_dir", "templates"),
    )
    conference_id: OptionalEntityId = None
    workers: int = Field(default=1, ge=1)

    def resolved(self, base_dir: Path) -> PublishConfig:
        """Return a copy with relative paths anchored at *base_dir*."""

        def anchor(path: Path | None) -> Path | None:
            if path is None or path.is_absolute():
                return path
            return base_dir / path

        return self.model_copy(update={
            "cache_dir": anchor(self.cache_dir),
            "output_dir": anchor(self.output_dir),
            "templates_dir": anchor(self.templates_dir),
        })


def load_config(path=None) -> PublishConfig:
    """Load :class:`PublishConfig` from the JSON document at *path*.

    A missing *path* (or ``None``) yields the defaults.

    Raises
    ------
    ValueError
        If the document is not valid JSON or holds invalid settings.
    """
    if path is None:
        return PublishConfig()
    path = Path(path)
    if not path.is_file():
        logger.info("No config file at %s, using defaults", path)
        return PublishConfig()

    data = read_json_strict(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: config must be a JSON object")
    section = data.get(CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ValueError(f"{path}: '{CONFIG_SECTION}' must be a JSON object")
    try:
        config = PublishConfig.model_validate(section)
    except ValidationError as exc:
        raise ValueError(f"{path}: invalid settings: {exc}") from exc
    return config.resolved(path.resolve().parent)
