"""
Timeout guard.

Races an awaitable against a timer. The caller observes exactly one of:
the operation's result, the operation's own exception, or
OperationTimeoutError. When the timer wins the operation is cancelled;
work that was pushed to a thread keeps running and its result is dropped.
"""

import asyncio
from typing import Awaitable, TypeVar

import structlog

from contract_assistant.retry.exceptions import OperationTimeoutError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def run_with_timeout(
    operation: Awaitable[T],
    timeout_ms: int,
    operation_name: str = "operation",
) -> T:
    """
    Await `operation` for at most `timeout_ms` milliseconds.

    Raises:
        OperationTimeoutError: The timer fired first
        Exception: Whatever the operation raised, unchanged
    """
    task = asyncio.ensure_future(operation)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        # Failed while being cancelled; the timeout is still what the caller sees
        logger.debug("Operation failed during cancellation", operation=operation_name, error_type=type(e).__name__)

    logger.warning("Operation timed out", operation=operation_name, timeout_ms=timeout_ms)
    raise OperationTimeoutError(timeout_ms, operation_name)
