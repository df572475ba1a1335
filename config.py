"""
Agromet Normalizer - Configuration
Central configuration for the observation normalization pipeline.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return float(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# ============================================================================
# DATA QUALITY
# ============================================================================

# Duplicate readings tolerated per parameter batch before it is rejected (5%)
MAX_DUPLICATE_RATIO = _env_float("NORMALIZER_MAX_DUPLICATE_RATIO", 0.05)

# Reference zone for calendar-hour bucket alignment
DEFAULT_TIMEZONE = os.environ.get("NORMALIZER_TIMEZONE", "UTC")

# Output resolution of the canonical envelope
OUTPUT_INTERVAL_SECONDS = 3600

# ============================================================================
# FETCH FAN-OUT
# ============================================================================

# Max concurrent upstream fetches (0 = one task per requested parameter)
FETCH_CONCURRENCY = int(os.environ.get("NORMALIZER_FETCH_CONCURRENCY", "0") or 0)

# Deadline for a whole request; unset means no deadline
FETCH_TIMEOUT_SECONDS = _env_float("NORMALIZER_FETCH_TIMEOUT_SECONDS", None)

# Fail the whole request if any parameter fails
ALL_OR_NOTHING = _env_bool("NORMALIZER_ALL_OR_NOTHING", False)

# ============================================================================
# PROVIDER FORMATS
# ============================================================================

TAHMO_PROVIDER = "tahmo"
TAHMO_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
TAHMO_NULL_LITERAL = "null"


@dataclass(frozen=True)
class PipelineSettings:
    """Immutable settings passed explicitly through the pipeline."""
    max_duplicate_ratio: float = 0.05
    time_zone: str = "UTC"
    concurrency: int = 0
    timeout_seconds: Optional[float] = None
    all_or_nothing: bool = False

    def __post_init__(self):
        if self.max_duplicate_ratio < 0:
            raise ValueError(f"max_duplicate_ratio must be >= 0, got {self.max_duplicate_ratio}")
        if self.concurrency < 0:
            raise ValueError(f"concurrency must be >= 0, got {self.concurrency}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")


def get_settings() -> PipelineSettings:
    """Build settings from the environment-derived constants."""
    return PipelineSettings(
        max_duplicate_ratio=MAX_DUPLICATE_RATIO,
        time_zone=DEFAULT_TIMEZONE,
        concurrency=FETCH_CONCURRENCY,
        timeout_seconds=FETCH_TIMEOUT_SECONDS,
        all_or_nothing=ALL_OR_NOTHING,
    )
