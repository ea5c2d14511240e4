"""
Result-handling policies for adapter operations.

Reads and writes fail differently: a failed read is invisible to the user
(empty list), a failed write must reach the user. Each public operation of
LiveTvService runs under exactly one of these two policies.

Neither policy catches asyncio.CancelledError (a BaseException), so
cancellation always propagates unchanged.
"""
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tvheadend_livetv.errors import ConfigurationUnavailableError


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def read_or_empty(
    description: str,
    operation: Callable[[], Awaitable[T]],
    empty: Callable[[], T],
) -> T:
    """
    Run a read operation, degrading to an empty result on failure

    Args:
        description: What is being fetched, for the log line
        operation: Coroutine function performing the read
        empty: Factory for the empty result

    Returns:
        The operation's result, or empty() if it raised

    Raises:
        ConfigurationUnavailableError: Configuration problems are never degraded
    """
    try:
        return await operation()
    except ConfigurationUnavailableError:
        raise
    except Exception as exc:
        logger.error("Error occurred while fetching %s from TVHeadend: %s", description, exc, exc_info=True)
        return empty()


async def write_or_raise(
    description: str,
    operation: Callable[[], Awaitable[T]],
) -> T:
    """
    Run a write operation, logging and re-raising any failure

    Args:
        description: What is being changed, for the log line
        operation: Coroutine function performing the write

    Returns:
        The operation's result
    """
    try:
        return await operation()
    except Exception as exc:
        logger.error("Error occurred while attempting to %s: %s", description, exc, exc_info=True)
        raise
