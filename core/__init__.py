"""
Agromet Normalizer - Observation Normalization & Temporal Aggregation

Components:
- catalogue: provider variable code -> canonical parameter, scale, reducer
- ingestor: raw readings -> scaled observations, interval inference
- dedup: validity-signature deduplication with a duplicate-ratio limit
- aggregator: 5-minute -> hourly reduction (average, sum, maximum)
- merger: sorted per-parameter series and the multi-location envelope
- pipeline: per-parameter run and the normalize() entry point
- orchestrator: concurrent fetch fan-out/fan-in

Usage:
    from core import normalize, NormalizationRequest
    from core.catalogue import lookup

    result = normalize([NormalizationRequest(1002, readings, lookup("tahmo", "te"))])
    series = result.data.data_for_parameter(1002)
"""

from .models import (
    CanonicalWeatherData,
    IntervalKind,
    Location,
    LocationSeries,
    NormalizationRequest,
    NormalizationResult,
    Observation,
    ObservationSeries,
    ParameterError,
    RawReading,
    Reducer,
    VariableMapping,
)
from .errors import (
    ExcessiveDuplicates,
    IncompleteNormalization,
    InvalidAggregationType,
    InvalidTimeZone,
    MalformedTimestamp,
    NormalizationError,
)
from .pipeline import normalize
from .orchestrator import FetchJob, fetch_and_normalize

__all__ = [
    "CanonicalWeatherData", "IntervalKind", "Location", "LocationSeries",
    "NormalizationRequest", "NormalizationResult", "Observation",
    "ObservationSeries", "ParameterError", "RawReading", "Reducer",
    "VariableMapping",
    "ExcessiveDuplicates", "IncompleteNormalization", "InvalidAggregationType",
    "InvalidTimeZone", "MalformedTimestamp", "NormalizationError",
    "normalize", "FetchJob", "fetch_and_normalize",
]
