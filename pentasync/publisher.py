"""
pentasync/publisher.py -- One publishing run, start to finish.

Loads the cache, builds the index, renders every page and only then
synchronizes the output tree.  Integrity, cache, slug and template
errors therefore all surface before the first write.

Usage:
    from pentasync.config import load_config
    from pentasync.publisher import publish

    result = publish(load_config("config.json"))
    print(result.report.summary())
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from pentasync.artifact_sync import SyncReport, synchronize
from pentasync.config import PublishConfig
from pentasync.entity_store import EntityStore
from pentasync.index_builder import ScheduleIndex, build_index
from pentasync.pages import plan_pages
from pentasync.renderer import PageRenderer

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    index: ScheduleIndex
    report: SyncReport
    elapsed: float


def publish(config: PublishConfig) -> PublishResult:
    """Publish the schedule described by *config*.

    Raises
    ------
    CacheError, ScheduleIntegrityError, SlugError, RenderError
        Before any file under the output directory is touched.
    OSError
        If reconciling the output directory fails.
    """
    time_before = time.monotonic()
    if config.conference_id is not None:
        logger.info("Publishing schedule for conference %s", config.conference_id)

    context = EntityStore(config.cache_dir).load_all()
    index = build_index(context)
    pages = plan_pages(index, PageRenderer(config.templates_dir))
    report = synchronize(config.output_dir, pages, workers=config.workers)

    return PublishResult(index=index, report=report, elapsed=time.monotonic() - time_before)
