"""Tracker configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class TrackerSettings(BaseSettings):
    model_config = {"env_prefix": "TRACKER_"}

    # strict: an inconsistent event aborts the replay; otherwise it is logged and skipped
    strict: bool = True
    trace_search: bool = False
    log_dir: str | None = Field(default=None, min_length=1)
    max_events: int = Field(default=100_000, ge=1)
