"""
Canonical observation data model.

Raw readings come in per provider variable; everything after the ingestor
works on Observation and the series/envelope types built from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")

CanonicalParameter = int


class Reducer(str, Enum):
    AVERAGE = "AVERAGE"
    SUM = "SUM"
    MAXIMUM = "MAXIMUM"


class IntervalKind(str, Enum):
    FIVE_MIN = "FIVE_MIN"
    HOURLY = "HOURLY"

    @property
    def seconds(self) -> int:
        return 300 if self is IntervalKind.FIVE_MIN else 3600


@dataclass(frozen=True)
class VariableMapping:
    """
    One provider variable and how it maps onto the canonical parameter set.
    scale_factor is multiplicative (e.g. relative humidity 0-1 -> 0-100).
    """
    provider: str
    provider_code: str
    canonical_parameter: CanonicalParameter
    scale_factor: float = 1.0
    reducer: Union[Reducer, str] = Reducer.AVERAGE
    measurement_code: str = ""  # Legacy station-network element code (TM, RR, ...)
    name: str = ""


@dataclass(frozen=True)
class RawReading:
    provider_code: str
    timestamp: Union[str, datetime]
    raw_value: Any


@dataclass(frozen=True)
class Observation:
    canonical_parameter: CanonicalParameter
    timestamp: datetime  # tz-aware, UTC
    value: float
    interval: IntervalKind

    @property
    def validity_signature(self) -> Tuple[CanonicalParameter, datetime, IntervalKind]:
        """Identity key: two observations sharing it describe the same fact."""
        return (self.canonical_parameter, self.timestamp, self.interval)


@dataclass(frozen=True)
class ObservationSeries:
    canonical_parameter: CanonicalParameter
    observations: Tuple[Observation, ...] = ()

    def __len__(self) -> int:
        return len(self.observations)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self.observations)

    @property
    def values(self) -> List[float]:
        return [o.value for o in self.observations]

    @property
    def timestamps(self) -> List[datetime]:
        return [o.timestamp for o in self.observations]

    @property
    def start(self) -> Optional[datetime]:
        return self.observations[0].timestamp if self.observations else None

    @property
    def end(self) -> Optional[datetime]:
        return self.observations[-1].timestamp if self.observations else None


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    altitude: float = 0.0


@dataclass
class LocationSeries:
    location: Location
    series: Dict[CanonicalParameter, ObservationSeries] = field(default_factory=dict)

    @property
    def latitude(self) -> float:
        return self.location.latitude

    @property
    def longitude(self) -> float:
        return self.location.longitude

    @property
    def altitude(self) -> float:
        return self.location.altitude


@dataclass
class CanonicalWeatherData:
    """The pipeline's output envelope. Always hourly."""
    interval_seconds: int = 3600
    locations: List[LocationSeries] = field(default_factory=list)

    @property
    def weather_parameters(self) -> List[CanonicalParameter]:
        params = set()
        for loc in self.locations:
            params.update(loc.series.keys())
        return sorted(params)

    @property
    def time_start(self) -> Optional[datetime]:
        starts = [s.start for loc in self.locations for s in loc.series.values() if s.start]
        return min(starts) if starts else None

    @property
    def time_end(self) -> Optional[datetime]:
        ends = [s.end for loc in self.locations for s in loc.series.values() if s.end]
        return max(ends) if ends else None

    def data_for_parameter(self, parameter: CanonicalParameter) -> List[ObservationSeries]:
        """One series per location that carries the parameter, in location order."""
        return [loc.series[parameter] for loc in self.locations if parameter in loc.series]


@dataclass(frozen=True)
class NormalizationRequest:
    canonical_parameter: CanonicalParameter
    raw_readings: Optional[List[RawReading]]
    mapping: VariableMapping
    time_zone: Optional[str] = None  # None = settings default
    location: Location = Location(0.0, 0.0)


@dataclass
class ParameterError:
    canonical_parameter: CanonicalParameter
    kind: str
    message: str
    detail: Dict[str, Any] = field(default_factory=dict)


@dataclass
class NormalizationResult:
    data: CanonicalWeatherData
    errors: List[ParameterError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
