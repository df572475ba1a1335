"""
Agromet Normalizer - TAHMO datahub series decoder
Turns a TAHMO measurements response into RawReadings for the pipeline.

Response shape (abridged):
    {"results": [{"series": [{"columns": ["time", ..., "value", "variable"],
                              "values": [["2021-01-01T00:00:00Z", ..., 24.1, "te"], ...]}]}]}
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from core.models import RawReading

logger = logging.getLogger("tahmo_series")

TIME_COLUMN = "time"
VARIABLE_COLUMN = "variable"
VALUE_COLUMN = "value"


def find_value(node: Any, key: str) -> Any:
    """Depth-first search for the first occurrence of key in nested JSON."""
    if isinstance(node, dict):
        if key in node:
            return node[key]
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None
    for child in children:
        found = find_value(child, key)
        if found is not None:
            return found
    return None


def _column_index(columns: List[str], name: str) -> int:
    try:
        return columns.index(name)
    except ValueError:
        raise ValueError(f"TAHMO series has no {name!r} column: {columns}") from None


def decode_series(payload: Any) -> Optional[List[RawReading]]:
    """
    Extract readings from a TAHMO response (or its "series" node).

    Returns None when the response carries no values at all, which the
    pipeline treats as an empty upstream.
    """
    if payload is None:
        logger.info("No valid response from TAHMO")
        return None
    series = find_value(payload, "series")
    if series is None:
        series = payload
    values = find_value(series, "values")
    if values is None:
        logger.info("No valid response from TAHMO")
        return None

    columns = [str(c) for c in (find_value(series, "columns") or [])]
    time_idx = _column_index(columns, TIME_COLUMN)
    variable_idx = _column_index(columns, VARIABLE_COLUMN)
    value_idx = _column_index(columns, VALUE_COLUMN)
    width = max(time_idx, variable_idx, value_idx)

    readings: List[RawReading] = []
    for row in values:
        # Skip rows without content
        if not isinstance(row, list) or len(row) <= 1:
            continue
        if len(row) <= width:
            logger.warning(f"Skipping short TAHMO row: {row}")
            continue
        readings.append(
            RawReading(
                provider_code=str(row[variable_idx]),
                timestamp=str(row[time_idx]),
                raw_value=row[value_idx],
            )
        )
    return readings


def decode_response_text(text: str) -> Optional[List[RawReading]]:
    if not text or not text.strip():
        return None
    return decode_series(json.loads(text))
