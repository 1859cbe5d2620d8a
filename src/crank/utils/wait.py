"""Fixed-tick polling with an optional bound."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from crank.errors import DeviceTimeoutError

logger = logging.getLogger(__name__)


def wait_until(
    condition: Callable[[], bool],
    description: str,
    tick: float = 0.1,
    timeout: Optional[float] = None,
    settle_ticks: int = 0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Block until ``condition()`` is true, polling every ``tick`` seconds.

    Args:
        condition: Zero-argument predicate, re-evaluated each tick
        description: What is being waited for (used in logs and errors)
        tick: Poll interval in seconds
        timeout: Upper bound in seconds; ``None`` waits forever
        settle_ticks: Extra ticks to sleep once the condition first holds
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Raises:
        DeviceTimeoutError: If ``timeout`` elapses before the condition holds
    """
    deadline = None if timeout is None else clock() + timeout
    polls = 0
    while not condition():
        if deadline is not None and clock() >= deadline:
            raise DeviceTimeoutError(description, timeout)
        if polls % 50 == 0:
            logger.info(f"Waiting for {description}")
        polls += 1
        sleep(tick)

    logger.debug(f"Observed {description} after {polls} poll(s)")
    if settle_ticks:
        sleep(tick * settle_ticks)
