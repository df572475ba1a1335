from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from config import OUTPUT_INTERVAL_SECONDS
from core.models import (
    CanonicalWeatherData,
    Location,
    LocationSeries,
    Observation,
    ObservationSeries,
)

logger = logging.getLogger("merger")


def merge_series(
    canonical_parameter: int,
    passthrough: Sequence[Observation] = (),
    aggregated: Sequence[Observation] = (),
) -> ObservationSeries:
    """Native-hourly plus aggregated observations, stable-sorted by timestamp."""
    combined = list(passthrough) + list(aggregated)
    combined.sort(key=lambda o: o.timestamp)
    return ObservationSeries(canonical_parameter, tuple(combined))


def build_weather_data(
    entries: Iterable[Tuple[Location, ObservationSeries]],
) -> CanonicalWeatherData:
    """Group per-parameter series by location (first-seen order) into the envelope."""
    by_location: Dict[Location, LocationSeries] = {}
    for location, series in entries:
        loc_series = by_location.get(location)
        if loc_series is None:
            loc_series = LocationSeries(location)
            by_location[location] = loc_series
        if series.canonical_parameter in loc_series.series:
            logger.warning(
                f"Parameter {series.canonical_parameter} requested twice for {location}, keeping the later series"
            )
        loc_series.series[series.canonical_parameter] = series
    locations: List[LocationSeries] = list(by_location.values())
    return CanonicalWeatherData(interval_seconds=OUTPUT_INTERVAL_SECONDS, locations=locations)
