"""Settings for the trace analyzer, read from the environment or a .env file.

The processing functions themselves never read configuration; the analyzer
passes these values to them as arguments.

Environment variables
---------------------
TRACE_DUPLICATE_SPAN_POLICY
    "last" (default) or "first": which record wins for a repeated span_id.
TRACE_LATENCY_BANDS_MS
    Comma separated histogram band edges in ms (default "100,500,1000,5000,10000").
TRACE_INCLUDE_EMPTY_IO
    "true" to keep spans without input/output in the IO list (default "false").
"""

import os
import logging
from typing import Any, Dict, List

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field, field_validator

from .histogram import DEFAULT_BAND_EDGES_MS, latency_bands
from .models import LatencyBand
from .tree import DuplicatePolicy

load_dotenv(find_dotenv(usecwd=True), override=False)

logger = logging.getLogger(__name__)

ENV_DUPLICATE_SPAN_POLICY = "TRACE_DUPLICATE_SPAN_POLICY"
ENV_LATENCY_BANDS_MS = "TRACE_LATENCY_BANDS_MS"
ENV_INCLUDE_EMPTY_IO = "TRACE_INCLUDE_EMPTY_IO"


class Settings(BaseModel):
    """Analyzer settings, validated on construction."""

    duplicate_span_policy: DuplicatePolicy = DuplicatePolicy.LAST
    latency_band_edges_ms: List[float] = Field(
        default_factory=lambda: list(DEFAULT_BAND_EDGES_MS)
    )
    include_empty_io: bool = False

    @field_validator("duplicate_span_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("latency_band_edges_ms", mode="before")
    @classmethod
    def split_edges(cls, v):
        """Accept "100,500,1000" as well as a list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @field_validator("latency_band_edges_ms")
    @classmethod
    def sort_edges(cls, v: List[float]) -> List[float]:
        if any(edge < 0 for edge in v):
            raise ValueError("latency band edges must be non-negative")
        return sorted(v)

    @property
    def bands(self) -> List[LatencyBand]:
        return latency_bands(self.latency_band_edges_ms)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, defaults for unset ones."""
        values: Dict[str, Any] = {}
        if os.getenv(ENV_DUPLICATE_SPAN_POLICY):
            values["duplicate_span_policy"] = os.getenv(ENV_DUPLICATE_SPAN_POLICY)
        if os.getenv(ENV_LATENCY_BANDS_MS):
            values["latency_band_edges_ms"] = os.getenv(ENV_LATENCY_BANDS_MS)
        if os.getenv(ENV_INCLUDE_EMPTY_IO):
            values["include_empty_io"] = os.getenv(ENV_INCLUDE_EMPTY_IO)

        settings = cls(**values)
        logger.debug(f"Loaded settings: {settings.model_dump()}")
        return settings


def get_settings() -> Settings:
    return Settings.from_env()
