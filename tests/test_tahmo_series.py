import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from collector.tahmo_series import decode_response_text, decode_series, find_value
from core.catalogue import lookup
from core.models import NormalizationRequest
from core.pipeline import normalize
from config import PipelineSettings


DAY = datetime(2021, 1, 1, tzinfo=timezone.utc)
COLUMNS = ["time", "duration", "quality", "sensor", "station", "value", "variable"]


def _response(rows):
    return {
        "results": [
            {
                "statement_id": 0,
                "series": [{"name": "controlled", "columns": COLUMNS, "values": rows}],
            }
        ]
    }


def _row(ts, value, variable="te"):
    return [ts.strftime("%Y-%m-%dT%H:%M:%SZ"), 300, 1, "TH00000", "TA00321", value, variable]


def test_decode_series_reads_columns_by_name():
    rows = [_row(DAY, 24.1), _row(DAY + timedelta(minutes=5), None), [], _row(DAY, 0.3, "pr")]
    readings = decode_series(_response(rows))

    assert [(r.provider_code, r.raw_value) for r in readings] == [
        ("te", 24.1),
        ("te", None),
        ("pr", 0.3),
    ]
    assert readings[0].timestamp == "2021-01-01T00:00:00Z"


def test_decode_series_without_values_is_empty_upstream():
    assert decode_series(None) is None
    assert decode_series({"results": [{"statement_id": 0}]}) is None
    assert decode_response_text("  ") is None


def test_decode_series_requires_known_columns():
    payload = {"series": [{"columns": ["time", "value"], "values": [["2021-01-01T00:00:00Z", 1]]}]}
    with pytest.raises(ValueError):
        decode_series(payload)


def test_find_value_searches_nested_lists():
    assert find_value({"a": [{"b": {"series": 1}}]}, "series") == 1
    assert find_value([1, 2, 3], "series") is None


def test_one_day_of_five_minute_response_normalizes_to_24_hours():
    rows = [_row(DAY + timedelta(minutes=5 * i), 20.0 + (i % 12)) for i in range(288)]
    readings = decode_response_text(json.dumps(_response(rows)))

    result = normalize(
        [NormalizationRequest(1002, readings, lookup("tahmo", "te"))],
        settings=PipelineSettings(),
    )

    series = result.data.data_for_parameter(1002)[0]
    assert result.ok
    assert len(series) == 24
    assert all(v == pytest.approx(25.5) for v in series.values)
