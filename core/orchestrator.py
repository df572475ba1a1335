"""
Agromet Normalizer - Fetch Orchestrator

Fans out one fetch + normalization task per requested canonical parameter
and fans the results back in before merging:
  1. Each task awaits the fetch collaborator (the only suspension point),
     optionally behind a semaphore that caps upstream concurrency.
  2. The fetched readings go through the per-parameter pipeline.
  3. Tasks still running at the request deadline are cancelled and
     contribute an empty series plus a "Cancelled" error.
  4. Series are assembled in job order regardless of completion order.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from config import PipelineSettings, get_settings
from core.errors import NormalizationError, ParameterCancelled, UpstreamFetchFailed
from core.models import (
    Location,
    NormalizationResult,
    ObservationSeries,
    ParameterError,
    RawReading,
    VariableMapping,
)
from core.pipeline import capture_failure, finish, process_readings

logger = logging.getLogger("orchestrator")


@dataclass(frozen=True)
class FetchJob:
    canonical_parameter: int
    mapping: VariableMapping
    location: Location = Location(0.0, 0.0)
    time_zone: Optional[str] = None


Fetcher = Callable[[FetchJob], Awaitable[Optional[List[RawReading]]]]


async def _run_job(
    fetch: Fetcher,
    job: FetchJob,
    settings: PipelineSettings,
    semaphore: Optional[asyncio.Semaphore],
) -> ObservationSeries:
    try:
        if semaphore is None:
            readings = await fetch(job)
        else:
            async with semaphore:
                readings = await fetch(job)
    except Exception as e:
        raise UpstreamFetchFailed(
            f"Fetch failed for {job.mapping.provider}/{job.mapping.provider_code}: {e}",
            {"provider": job.mapping.provider, "provider_code": job.mapping.provider_code},
        ) from e

    return process_readings(
        job.canonical_parameter,
        readings,
        job.mapping,
        time_zone=job.time_zone or settings.time_zone,
        max_duplicate_ratio=settings.max_duplicate_ratio,
    )


async def fetch_and_normalize(
    fetch: Fetcher,
    jobs: Sequence[FetchJob],
    *,
    settings: Optional[PipelineSettings] = None,
) -> NormalizationResult:
    """
    Fetch and normalize every job concurrently.

    Args:
        fetch: async collaborator returning the raw readings for one job
            (None or [] for no data)
        jobs: one entry per requested canonical parameter and location
        settings: concurrency cap, deadline, thresholds, all-or-nothing flag

    Returns:
        NormalizationResult with the merged envelope and per-parameter errors
    """
    settings = settings or get_settings()
    semaphore = asyncio.Semaphore(settings.concurrency) if settings.concurrency else None

    tasks = [
        asyncio.create_task(_run_job(fetch, job, settings, semaphore))
        for job in jobs
    ]
    try:
        if tasks:
            _done, pending = await asyncio.wait(tasks, timeout=settings.timeout_seconds)
            if pending:
                logger.warning(
                    f"Deadline of {settings.timeout_seconds}s reached, cancelling {len(pending)} parameter task(s)"
                )
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
    finally:
        leftover = [task for task in tasks if not task.done()]
        for task in leftover:
            task.cancel()
        if leftover:
            await asyncio.gather(*leftover, return_exceptions=True)

    entries: List[Tuple[Location, ObservationSeries]] = []
    errors: List[ParameterError] = []
    for job, task in zip(jobs, tasks):
        try:
            if task.cancelled():
                raise ParameterCancelled(
                    f"Parameter {job.canonical_parameter} cancelled at deadline",
                    {"timeout_seconds": settings.timeout_seconds},
                )
            series = task.result()
        except NormalizationError as e:
            errors.append(capture_failure(job.canonical_parameter, e))
            series = ObservationSeries(job.canonical_parameter)
        entries.append((job.location, series))

    logger.info(f"Normalized {len(jobs)} parameter(s), {len(errors)} error(s)")
    return finish(entries, errors, settings)
