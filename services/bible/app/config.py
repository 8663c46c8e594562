"""Application configuration using Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObservabilitySettings(BaseModel):
    otel_service_name: str = "planning-bible"
    otel_exporter_otlp_endpoint: str | None = None
    log_level: str = "INFO"


class AggregationTuning(BaseModel):
    max_runs_per_project: int = Field(default=3, ge=1)
    handoff_phase_total: int = Field(
        default=16,
        ge=1,
        description="Phase count the handoff completeness percentage is measured against",
    )
    default_strategy: Literal["latest", "best_score", "merge"] = "best_score"


class BibleSettings(BaseSettings):
    observability: ObservabilitySettings = ObservabilitySettings()
    aggregation: AggregationTuning = AggregationTuning()
    environment: Literal["dev", "qa", "prod"] | str = "dev"

    model_config = SettingsConfigDict(env_nested_delimiter="__", env_prefix="BIBLE_", case_sensitive=False)


@lru_cache(maxsize=1)
def get_settings(**kwargs: Any) -> BibleSettings:
    """Return cached settings instance."""
    return BibleSettings(**kwargs)


__all__ = ["BibleSettings", "get_settings"]
