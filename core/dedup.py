from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from config import MAX_DUPLICATE_RATIO
from core.errors import ExcessiveDuplicates
from core.models import Observation

logger = logging.getLogger("dedup")


def deduplicate(
    observations: Sequence[Observation],
    max_ratio: Optional[float] = MAX_DUPLICATE_RATIO,
) -> List[Observation]:
    """
    Collapse observations sharing a validity signature (last one wins).

    Raises ExcessiveDuplicates when duplicates / total exceeds max_ratio.
    """
    if max_ratio is None:
        max_ratio = 0.05
    if max_ratio < 0:
        raise ValueError(f"max_ratio must be >= 0, got {max_ratio}")
    if not observations:
        return []

    unique: Dict[tuple, Observation] = {}
    for obs in observations:
        unique[obs.validity_signature] = obs

    total = len(observations)
    duplicates = total - len(unique)
    ratio = duplicates / total
    parameter = observations[0].canonical_parameter

    if ratio > max_ratio:
        raise ExcessiveDuplicates(
            f"Too many duplicates for {parameter}: {duplicates} ({ratio:.2%})",
            {
                "canonical_parameter": parameter,
                "duplicates": duplicates,
                "total": total,
                "ratio": ratio,
            },
        )
    if duplicates:
        logger.info(f"Removed {duplicates} duplicate observations for {parameter}")
    return list(unique.values())
