from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence

import httpx

logger = logging.getLogger(__name__)

# Errors a resource call can raise: transport/status failures and bodies
# that do not parse into the expected shape.
RESOURCE_ERRORS = (httpx.HTTPError, ValueError, KeyError, TypeError)


async def settle(action: str, labels: Sequence[str], calls: Sequence[Awaitable]):
    """Run resource calls concurrently and split outcomes.

    Returns ``(succeeded, failed)`` where ``succeeded`` holds ``(label,
    result)`` pairs and ``failed`` holds ``(label, exception)`` pairs. Failures
    are logged, never raised.
    """
    results = await asyncio.gather(*calls, return_exceptions=True)
    succeeded = []
    failed = []
    for label, result in zip(labels, results):
        if isinstance(result, BaseException):
            if not isinstance(result, RESOURCE_ERRORS):
                raise result
            logger.warning("%s failed for %s: %s", action, label, result)
            failed.append((label, result))
        else:
            succeeded.append((label, result))
    if failed:
        logger.warning(
            "%s: %d of %d requests failed", action, len(failed), len(results)
        )
    return succeeded, failed
