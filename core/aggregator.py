"""
Temporal Aggregator

Buckets 5-minute observations into calendar hours of a reference zone and
collapses each bucket with the parameter's reducer.

Partial buckets (fewer than 12 samples) are aggregated as-is: there is no
minimum sample count, so an hour with a single reading yields a value. The
count of partial buckets is logged so the leniency stays visible.
"""

from __future__ import annotations

import logging
import math
import statistics
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Dict, List, Sequence, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.errors import InvalidAggregationType, InvalidTimeZone
from core.models import UTC, IntervalKind, Observation, Reducer

logger = logging.getLogger("aggregator")

SAMPLES_PER_HOUR = 12

REDUCERS: Dict[Reducer, Callable[[List[float]], float]] = {
    Reducer.AVERAGE: statistics.fmean,
    Reducer.SUM: math.fsum,
    Reducer.MAXIMUM: max,
}


def resolve_reducer(reducer: Union[Reducer, str]) -> Reducer:
    try:
        resolved = Reducer(reducer)
    except ValueError as e:
        raise InvalidAggregationType(
            f"Invalid aggregation type {reducer!r}", {"reducer": str(reducer)}
        ) from e
    if resolved not in REDUCERS:
        raise InvalidAggregationType(
            f"No reducer registered for {resolved.value}", {"reducer": resolved.value}
        )
    return resolved


def resolve_zone(time_zone: Union[str, ZoneInfo]) -> ZoneInfo:
    if isinstance(time_zone, ZoneInfo):
        return time_zone
    try:
        return ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise InvalidTimeZone(
            f"Unknown time zone {time_zone!r}", {"time_zone": str(time_zone)}
        ) from e


def hour_bucket(timestamp: datetime, time_zone: Union[str, ZoneInfo] = UTC) -> datetime:
    """Start of the calendar hour containing timestamp in time_zone, as UTC."""
    local = timestamp.astimezone(resolve_zone(time_zone))
    return local.replace(minute=0, second=0, microsecond=0).astimezone(UTC)


def aggregate_hourly(
    observations: Sequence[Observation],
    reducer: Union[Reducer, str],
    time_zone: Union[str, ZoneInfo] = UTC,
) -> List[Observation]:
    """Reduce 5-minute observations to one HOURLY observation per non-empty hour."""
    fn = REDUCERS[resolve_reducer(reducer)]
    if not observations:
        return []

    zone = resolve_zone(time_zone)
    buckets: Dict[datetime, List[float]] = OrderedDict()
    for obs in sorted(observations, key=lambda o: o.timestamp):
        if obs.interval is not IntervalKind.FIVE_MIN:
            raise ValueError(f"Expected FIVE_MIN observations, got {obs.interval.value}")
        buckets.setdefault(hour_bucket(obs.timestamp, zone), []).append(obs.value)

    parameter = observations[0].canonical_parameter
    partial = sum(1 for values in buckets.values() if len(values) < SAMPLES_PER_HOUR)
    logger.info(
        f"Convert {len(observations)} observations to {len(buckets)} hourly values "
        f"for {parameter} ({partial} partial hours)"
    )

    return [
        Observation(
            canonical_parameter=parameter,
            timestamp=bucket,
            value=float(fn(values)),
            interval=IntervalKind.HOURLY,
        )
        for bucket, values in buckets.items()
    ]
