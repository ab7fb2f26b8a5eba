"""Bounded-concurrency batch scheduling of single-response generation."""

import asyncio
import inspect
import logging
import math
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from survey_synth.diversity import enforce_option_diversity
from survey_synth.models import (
    BatchReport,
    BatchTiming,
    GeneratedResponse,
    GenerationResult,
    Question,
)

logger = logging.getLogger(__name__)

BATCH_SIZE = 5

GenerateOne = Callable[[int], Awaitable[GeneratedResponse]]
BatchCallback = Callable[[BatchReport], Awaitable[None] | None]


async def _notify(callback: BatchCallback, report: BatchReport) -> None:
    """Invoke the per-batch callback; its failures never reach the scheduler."""
    try:
        result = callback(report)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("on_batch_complete handler failed for batch %d", report.batch_index + 1)


async def run_batches(
    generate_one: GenerateOne,
    questions: list[Question],
    count: int,
    *,
    max_concurrent_batches: int = 3,
    enforce_diversity: bool = True,
    on_batch_complete: BatchCallback | None = None,
) -> GenerationResult:
    """Generate ``count`` responses in batches of BATCH_SIZE.

    Up to ``max_concurrent_batches`` workers pull batch indices from a
    shared queue; each fans out one task per item in its batch and joins
    them before moving on. Results land at their ordinal position, so
    ``responses[i]`` is always ordinal ``i + 1`` regardless of completion
    order.

    Args:
        generate_one: Coroutine producing the response for a 1-based ordinal.
            Expected never to raise.
        questions: Survey questions, used by the diversity pass.
        count: Number of responses to produce.
        max_concurrent_batches: Worker count upper bound.
        enforce_diversity: Run the option-diversity pass on each batch.
        on_batch_complete: Optional sync or async callback, once per batch.

    Returns:
        GenerationResult with ordered responses and per-batch timings.
    """
    if count <= 0:
        return GenerationResult(responses=[], batch_timings=[])

    total_batches = math.ceil(count / BATCH_SIZE)
    slots: list[GeneratedResponse | None] = [None] * count
    timings: list[BatchTiming | None] = [None] * total_batches

    pending: asyncio.Queue[int] = asyncio.Queue()
    for batch_index in range(total_batches):
        pending.put_nowait(batch_index)

    async def run_batch(batch_index: int) -> None:
        batch_start = batch_index * BATCH_SIZE
        batch_count = min(BATCH_SIZE, count - batch_start)
        started_at = datetime.now(timezone.utc)
        started = time.monotonic()
        logger.info("Starting batch %d/%d (%d responses)", batch_index + 1, total_batches, batch_count)

        batch = list(await asyncio.gather(
            *(generate_one(batch_start + i + 1) for i in range(batch_count))
        ))
        if enforce_diversity:
            enforce_option_diversity(batch, questions)
        for offset, response in enumerate(batch):
            slots[batch_start + offset] = response

        completed_at = datetime.now(timezone.utc)
        duration_ms = int((time.monotonic() - started) * 1000)
        timings[batch_index] = BatchTiming(
            batch_number=batch_index + 1,
            started_at=started_at,
            completed_at=completed_at,
            duration_ms=duration_ms,
            response_count=batch_count,
        )
        logger.info("Batch %d/%d completed in %dms", batch_index + 1, total_batches, duration_ms)

        if on_batch_complete:
            await _notify(on_batch_complete, BatchReport(
                batch_index=batch_index,
                responses=batch,
                started_at=started_at,
                completed_at=completed_at,
                response_count=batch_count,
            ))

    async def worker() -> None:
        while True:
            try:
                batch_index = pending.get_nowait()
            except asyncio.QueueEmpty:
                return
            await run_batch(batch_index)

    workers = max(1, min(max_concurrent_batches, total_batches))
    await asyncio.gather(*(worker() for _ in range(workers)))

    return GenerationResult(
        responses=[r for r in slots if r is not None],
        batch_timings=[t for t in timings if t is not None],
    )
