"""
Variable Catalogue

Static, process-wide mapping of provider variable codes to canonical
parameters, scale factors and hourly reducers. Built once at import and
exposed read-only, so concurrent parameter tasks can share it freely.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from config import TAHMO_PROVIDER
from core.models import Reducer, VariableMapping


def build_catalogue(
    entries: Iterable[VariableMapping],
) -> Mapping[Tuple[str, str], VariableMapping]:
    """Index mappings by (provider, provider_code), rejecting duplicates."""
    table: Dict[Tuple[str, str], VariableMapping] = {}
    for entry in entries:
        key = (entry.provider, entry.provider_code)
        if key in table:
            raise ValueError(f"Duplicate mapping for provider {key[0]!r}, code {key[1]!r}")
        table[key] = entry
    return MappingProxyType(table)


# TAHMO relative humidity arrives as 0-1, canonical is 0-100
TAHMO_VARIABLES: List[VariableMapping] = [
    VariableMapping(TAHMO_PROVIDER, "te", 1002, 1, Reducer.AVERAGE, "TM", "SURFACE_AIR_TEMPERATURE"),
    VariableMapping(TAHMO_PROVIDER, "pr", 2001, 1, Reducer.SUM, "RR", "PRECIPITATION"),
    VariableMapping(TAHMO_PROVIDER, "wd", 4001, 1, Reducer.AVERAGE, "DM2", "WIND_DIRECTION"),
    VariableMapping(TAHMO_PROVIDER, "ws", 4003, 1, Reducer.AVERAGE, "FM2", "WIND_SPEED"),
    VariableMapping(TAHMO_PROVIDER, "wg", 4002, 1, Reducer.MAXIMUM, "FG2", "WIND_GUSTS"),
    VariableMapping(TAHMO_PROVIDER, "ra", 5001, 1, Reducer.AVERAGE, "Q0", "SHORTWAVE_RADIATION"),
    VariableMapping(TAHMO_PROVIDER, "st", 1112, 1, Reducer.AVERAGE, "TJM10", "SOIL_TEMPERATURE"),
    VariableMapping(TAHMO_PROVIDER, "rh", 3002, 100, Reducer.AVERAGE, "UM", "RELATIVE_HUMIDITY"),
]

CATALOGUE = build_catalogue(TAHMO_VARIABLES)


def lookup(
    provider: str,
    provider_code: str,
    catalogue: Mapping[Tuple[str, str], VariableMapping] = CATALOGUE,
) -> Optional[VariableMapping]:
    return catalogue.get((provider, provider_code))


def mapping_for_parameter(
    provider: str,
    canonical_parameter: int,
    catalogue: Mapping[Tuple[str, str], VariableMapping] = CATALOGUE,
) -> Optional[VariableMapping]:
    for (p, _code), entry in catalogue.items():
        if p == provider and entry.canonical_parameter == canonical_parameter:
            return entry
    return None


def for_canonical_ids(
    provider: str,
    canonical_ids: Iterable[int],
    catalogue: Mapping[Tuple[str, str], VariableMapping] = CATALOGUE,
) -> List[VariableMapping]:
    """Mappings for the requested parameters; unknown ids are skipped."""
    wanted: Set[int] = set(canonical_ids)
    return [
        entry
        for (p, _code), entry in catalogue.items()
        if p == provider and entry.canonical_parameter in wanted
    ]
