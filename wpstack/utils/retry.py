"""Polling helpers."""

from __future__ import annotations

import time
from collections.abc import Callable


def wait_for_condition(
    check: Callable[[], bool],
    *,
    timeout: float,
    initial_delay: float = 0.2,
    max_delay: float = 2.0,
    backoff: float = 2.0,
    abort: Callable[[], bool] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Poll ``check`` until it returns True or ``timeout`` seconds elapse.

    The delay between attempts starts at ``initial_delay`` and is multiplied
    by ``backoff`` after every miss, capped at ``max_delay``. The final sleep
    never overshoots the deadline.

    Args:
        check: Zero-argument predicate; exceptions propagate to the caller
        timeout: Overall budget in seconds
        initial_delay: First wait between attempts
        max_delay: Upper bound for a single wait
        backoff: Growth factor applied to the delay after each miss
        abort: Optional predicate checked after each miss; when it returns
               True polling stops immediately and False is returned
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        True if the condition was met, False on timeout or abort
    """
    deadline = clock() + timeout
    delay = initial_delay

    while True:
        if check():
            return True
        if abort is not None and abort():
            return False

        remaining = deadline - clock()
        if remaining <= 0:
            return False

        sleep(min(delay, remaining))
        delay = min(delay * backoff, max_delay)
