from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.dedup import deduplicate
from core.errors import ExcessiveDuplicates
from core.models import IntervalKind, Observation


START = datetime(2021, 1, 1, tzinfo=timezone.utc)


def _series(count, duplicates=0, interval=IntervalKind.FIVE_MIN):
    obs = [
        Observation(1002, START + timedelta(minutes=5 * i), float(i), interval)
        for i in range(count - duplicates)
    ]
    obs += [
        Observation(1002, START + timedelta(minutes=5 * i), float(i), interval)
        for i in range(duplicates)
    ]
    return obs


def test_deduplicate_at_ratio_threshold_passes():
    # 1 duplicate out of 20 = exactly 5%
    unique = deduplicate(_series(20, duplicates=1), 0.05)
    assert len(unique) == 19


def test_deduplicate_above_ratio_threshold_fails():
    with pytest.raises(ExcessiveDuplicates) as excinfo:
        deduplicate(_series(20, duplicates=2), 0.05)

    detail = excinfo.value.detail
    assert detail["canonical_parameter"] == 1002
    assert detail["duplicates"] == 2
    assert detail["total"] == 20
    assert detail["ratio"] == pytest.approx(0.1)


def test_deduplicate_is_idempotent():
    once = deduplicate(_series(40, duplicates=2))
    twice = deduplicate(once)
    assert set(twice) == set(once)
    assert len(twice) == len(once)


def test_deduplicate_last_write_wins():
    first = Observation(1002, START, 1.0, IntervalKind.FIVE_MIN)
    later = Observation(1002, START, 2.0, IntervalKind.FIVE_MIN)
    others = _series(30)[1:]

    unique = deduplicate([first] + others + [later])

    at_start = [o for o in unique if o.timestamp == START]
    assert at_start == [later]


def test_same_timestamp_different_interval_is_not_a_duplicate():
    a = Observation(1002, START, 1.0, IntervalKind.FIVE_MIN)
    b = Observation(1002, START, 1.0, IntervalKind.HOURLY)
    assert len(deduplicate([a, b])) == 2


def test_deduplicate_empty_and_bad_ratio():
    assert deduplicate([]) == []
    with pytest.raises(ValueError):
        deduplicate(_series(3), -0.1)
