from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.catalogue import CATALOGUE, build_catalogue, for_canonical_ids, lookup, mapping_for_parameter
from core.models import Reducer, VariableMapping


def test_reducers_per_parameter():
    assert lookup("tahmo", "pr").reducer is Reducer.SUM
    assert lookup("tahmo", "wg").reducer is Reducer.MAXIMUM
    for code in ("te", "rh", "ra", "ws", "wd", "st"):
        assert lookup("tahmo", code).reducer is Reducer.AVERAGE


def test_relative_humidity_is_scaled_to_percent():
    rh = mapping_for_parameter("tahmo", 3002)
    assert rh.provider_code == "rh"
    assert rh.scale_factor == 100
    assert rh.measurement_code == "UM"


def test_for_canonical_ids_skips_unknown_ids():
    selected = for_canonical_ids("tahmo", {1002, 2001, 9999})
    assert sorted(m.canonical_parameter for m in selected) == [1002, 2001]
    assert for_canonical_ids("other-provider", {1002}) == []


def test_lookup_misses_return_none():
    assert lookup("tahmo", "xx") is None
    assert mapping_for_parameter("tahmo", 9999) is None


def test_catalogue_is_read_only():
    with pytest.raises(TypeError):
        CATALOGUE[("tahmo", "xx")] = lookup("tahmo", "te")


def test_duplicate_provider_code_rejected():
    entries = [
        VariableMapping("tahmo", "te", 1002),
        VariableMapping("tahmo", "te", 1112),
    ]
    with pytest.raises(ValueError):
        build_catalogue(entries)
