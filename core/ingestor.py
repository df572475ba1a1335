"""
Agromet Normalizer - Raw Reading Ingestor
Turns (code, timestamp, value) triples from a provider feed into Observations.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Sequence

from config import TAHMO_NULL_LITERAL, TAHMO_TIMESTAMP_FORMAT
from core.errors import MalformedTimestamp
from core.models import UTC, IntervalKind, Observation, RawReading, VariableMapping

logger = logging.getLogger("ingestor")


@dataclass
class IngestResult:
    interval: IntervalKind
    observations: List[Observation] = field(default_factory=list)
    discarded: int = 0


def parse_timestamp(value: Any, timestamp_format: str = TAHMO_TIMESTAMP_FORMAT) -> datetime:
    """Parse a provider timestamp as a UTC instant. Naive datetimes are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    try:
        parsed = datetime.strptime(str(value).strip(), timestamp_format)
    except (TypeError, ValueError) as e:
        logger.error(f"Unable to parse timestamp {value!r} with format {timestamp_format}")
        raise MalformedTimestamp(
            f"Unparsable timestamp {value!r}",
            {"timestamp": str(value), "format": timestamp_format},
        ) from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_value(raw_value: Any, null_literal: str = TAHMO_NULL_LITERAL) -> Optional[float]:
    """Numeric value of a raw reading, or None for nulls and garbage."""
    if raw_value is None or isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, (int, float)):
        value = float(raw_value)
    else:
        text = str(raw_value).strip()
        if not text or text == null_literal:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    # nan/inf are dropped like garbage
    return value if math.isfinite(value) else None


def infer_interval(
    readings: Sequence[RawReading],
    timestamp_format: str = TAHMO_TIMESTAMP_FORMAT,
) -> IntervalKind:
    """
    Guess the native sampling interval from the first two readings as received.

    Both on the hour => hourly feed, anything else => 5-minute feed.
    Fewer than two readings => hourly.
    """
    if readings is None or len(readings) < 2:
        return IntervalKind.HOURLY
    first = parse_timestamp(readings[0].timestamp, timestamp_format)
    second = parse_timestamp(readings[1].timestamp, timestamp_format)
    if first.minute != 0 or second.minute != 0:
        logger.info(f"Assume 5m interval based on {first.isoformat()} and {second.isoformat()}")
        return IntervalKind.FIVE_MIN
    logger.info(f"Assume 1h interval based on {first.isoformat()} and {second.isoformat()}")
    return IntervalKind.HOURLY


def ingest(
    readings: Optional[Sequence[RawReading]],
    mapping: VariableMapping,
    *,
    timestamp_format: str = TAHMO_TIMESTAMP_FORMAT,
    null_literal: str = TAHMO_NULL_LITERAL,
) -> IngestResult:
    """
    Convert one parameter's raw readings into scaled Observations.

    Readings for other variable codes and null/unparsable values are dropped.
    A single bad timestamp fails the whole batch with MalformedTimestamp.
    """
    if not readings:
        return IngestResult(IntervalKind.HOURLY)

    interval = infer_interval(readings, timestamp_format)
    observations: List[Observation] = []
    skipped_code = 0
    skipped_value = 0

    for reading in readings:
        if reading.provider_code != mapping.provider_code:
            skipped_code += 1
            continue
        value = parse_value(reading.raw_value, null_literal)
        if value is None:
            if reading.raw_value is not None and str(reading.raw_value).strip() != null_literal:
                logger.warning(
                    f"Discarding unparsable value {reading.raw_value!r} for {mapping.provider_code}"
                )
            skipped_value += 1
            continue
        observations.append(
            Observation(
                canonical_parameter=mapping.canonical_parameter,
                timestamp=parse_timestamp(reading.timestamp, timestamp_format),
                value=value * mapping.scale_factor,
                interval=interval,
            )
        )

    if skipped_code or skipped_value:
        logger.info(
            f"{mapping.provider_code}: kept {len(observations)}/{len(readings)} readings "
            f"(other code: {skipped_code}, null/invalid: {skipped_value})"
        )
    return IngestResult(interval, observations, skipped_code + skipped_value)
