"""Outer process loop: repeats the sync batch forever."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from hubsync.models import DEFAULT_INTERVAL, DEFAULT_MAX_BACKOFF, BatchResult
from hubsync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


def next_delay(interval: float, consecutive_failures: int, max_backoff: float) -> float:
    """Delay before the next batch: interval, doubled per consecutive batch failure, capped."""
    if consecutive_failures <= 0:
        return interval
    return min(interval * 2 ** consecutive_failures, max(max_backoff, interval))


def run_forever(
    orchestrator: SyncOrchestrator,
    interval: float = DEFAULT_INTERVAL,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    max_cycles: int | None = None,
    on_cycle: Callable[[int, BatchResult], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Sleep, run a batch, repeat. Returns the number of cycles run.

    Any Exception escaping a batch is logged and the loop goes on; only
    KeyboardInterrupt/SystemExit end it. max_cycles bounds the loop for
    callers that do not want to run forever.
    """
    cycle = 0
    consecutive_failures = 0
    while max_cycles is None or cycle < max_cycles:
        sleep(next_delay(interval, consecutive_failures, max_backoff))
        cycle += 1
        try:
            result = orchestrator.run_batch()
        except Exception as e:
            consecutive_failures += 1
            logger.error("Sync cycle %d FAILED (%d in a row): %s", cycle, consecutive_failures, e, exc_info=e)
            continue

        consecutive_failures = 0
        if on_cycle is not None:
            try:
                on_cycle(cycle, result)
            except Exception as e:
                logger.error("Reporting cycle %d failed: %s", cycle, e, exc_info=e)
    return cycle
