"""
pentasync -- publishes a Pentabarf conference schedule as static pages.

Subpackages and modules:
    models          Typed, immutable schedule records (pydantic v2).
    entity_store    Loads the pre-built JSON cache into a ScheduleContext.
    index_builder   ID lookups, integrity checks and derived speaker sets.
    renderer        Jinja2 page renderer with the schedule page helpers.
    pages           Computes the desired set (target path -> content).
    artifact_sync   Reconciles the output tree against the desired set.
    publisher       Runs the whole pipeline once.
    main            Command-line entry point.
"""

__version__ = "1.0.0"
