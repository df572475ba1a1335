from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.models import ParameterError


class NormalizationError(Exception):
    """Base error for one parameter's pipeline. Never crosses parameter boundaries."""

    kind = "NormalizationError"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.detail = detail or {}

    def to_parameter_error(self, canonical_parameter: int) -> ParameterError:
        return ParameterError(
            canonical_parameter=canonical_parameter,
            kind=self.kind,
            message=str(self),
            detail=dict(self.detail),
        )


class MalformedTimestamp(NormalizationError):
    """A raw reading carried a timestamp that does not match the provider format."""

    kind = "MalformedTimestamp"


class ExcessiveDuplicates(NormalizationError):
    """Duplicate ratio above threshold: provider is replaying or overlapping windows."""

    kind = "ExcessiveDuplicates"


class InvalidAggregationType(NormalizationError):
    """Reducer not in AVERAGE/SUM/MAXIMUM. Configuration bug, never retried."""

    kind = "InvalidAggregationType"


class InvalidTimeZone(NormalizationError):
    """Reference time zone is not a known IANA key. Configuration bug."""

    kind = "InvalidTimeZone"


class UpstreamFetchFailed(NormalizationError):
    """The fetch collaborator raised instead of returning readings."""

    kind = "FetchFailed"


class ParameterCancelled(NormalizationError):
    """The parameter task was still running when the request deadline hit."""

    kind = "Cancelled"


class IncompleteNormalization(Exception):
    """Raised only when the caller asked for all-or-nothing semantics."""

    def __init__(self, errors: List[ParameterError]):
        kinds = ", ".join(f"{e.canonical_parameter}:{e.kind}" for e in errors)
        super().__init__(f"{len(errors)} parameter(s) failed: {kinds}")
        self.errors = list(errors)
