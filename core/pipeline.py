"""
Agromet Normalizer - Parameter Pipeline

ingest -> deduplicate -> (hourly aggregation for 5-minute feeds) -> merge,
run once per requested canonical parameter. Failures stay inside their
parameter: they become ParameterError entries next to an empty series.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from config import PipelineSettings, get_settings
from core.aggregator import aggregate_hourly, resolve_zone
from core.dedup import deduplicate
from core.errors import (
    IncompleteNormalization,
    InvalidAggregationType,
    InvalidTimeZone,
    NormalizationError,
)
from core.ingestor import ingest
from core.merger import build_weather_data, merge_series
from core.models import (
    IntervalKind,
    Location,
    NormalizationRequest,
    NormalizationResult,
    ObservationSeries,
    ParameterError,
    RawReading,
    VariableMapping,
)

logger = logging.getLogger("pipeline")


def process_readings(
    canonical_parameter: int,
    readings: Optional[Sequence[RawReading]],
    mapping: VariableMapping,
    *,
    time_zone: str = "UTC",
    max_duplicate_ratio: float = 0.05,
) -> ObservationSeries:
    """Hourly series for one parameter. Raises NormalizationError subclasses."""
    if not readings:
        logger.info(f"No upstream data for {canonical_parameter}, returning empty series")
        return ObservationSeries(canonical_parameter)

    zone = resolve_zone(time_zone)
    ingested = ingest(readings, mapping)
    unique = deduplicate(ingested.observations, max_duplicate_ratio)

    if ingested.interval is IntervalKind.FIVE_MIN:
        return merge_series(
            canonical_parameter,
            aggregated=aggregate_hourly(unique, mapping.reducer, zone),
        )
    return merge_series(canonical_parameter, passthrough=unique)


def run_parameter(
    request: NormalizationRequest,
    *,
    settings: Optional[PipelineSettings] = None,
) -> ObservationSeries:
    settings = settings or get_settings()
    return process_readings(
        request.canonical_parameter,
        request.raw_readings,
        request.mapping,
        time_zone=request.time_zone or settings.time_zone,
        max_duplicate_ratio=settings.max_duplicate_ratio,
    )


def capture_failure(canonical_parameter: int, exc: NormalizationError) -> ParameterError:
    """Log a parameter failure at the right severity and convert it."""
    if isinstance(exc, (InvalidAggregationType, InvalidTimeZone)):
        logger.exception(f"Configuration defect for parameter {canonical_parameter}: {exc}")
    else:
        logger.error(f"Parameter {canonical_parameter} failed ({exc.kind}): {exc}")
    return exc.to_parameter_error(canonical_parameter)


def finish(
    entries: List[Tuple[Location, ObservationSeries]],
    errors: List[ParameterError],
    settings: PipelineSettings,
) -> NormalizationResult:
    if errors and settings.all_or_nothing:
        raise IncompleteNormalization(errors)
    return NormalizationResult(build_weather_data(entries), errors)


def normalize(
    requests: Sequence[NormalizationRequest],
    *,
    settings: Optional[PipelineSettings] = None,
) -> NormalizationResult:
    """
    Normalize pre-fetched readings for every requested parameter.

    Returns the best-effort envelope plus per-parameter errors; raises
    IncompleteNormalization only under all-or-nothing settings.
    """
    settings = settings or get_settings()
    entries: List[Tuple[Location, ObservationSeries]] = []
    errors: List[ParameterError] = []

    for request in requests:
        try:
            series = run_parameter(request, settings=settings)
        except NormalizationError as e:
            errors.append(capture_failure(request.canonical_parameter, e))
            series = ObservationSeries(request.canonical_parameter)
        entries.append((request.location, series))

    return finish(entries, errors, settings)
