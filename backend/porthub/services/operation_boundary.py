"""Operation Boundary — converts raised PortHubErrors into Outcome rejections.

Invariants:
    - Wrapped coroutines return Outcome.success(result) or Outcome.rejected(error)
    - Only PortHubError is converted; anything else is a bug and propagates
    - Rejections are logged once, here, with job/account context

Design Decisions:
    - Decorator over try/except in every method: operation bodies read as the happy
      path with `raise` at each rule violation
"""

import functools
import logging
from typing import Awaitable, Callable, ParamSpec, TypeVar

from porthub.core.errors import ErrorSeverity, PortHubError
from porthub.core.outcome import Outcome

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def returns_outcome(
    method: Callable[P, Awaitable[T]],
) -> Callable[P, Awaitable[Outcome[T]]]:
    """Run an async operation, turning PortHubError into a typed rejection."""

    @functools.wraps(method)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Outcome[T]:
        try:
            return Outcome.success(await method(*args, **kwargs))
        except PortHubError as e:
            _log_rejection(method.__qualname__, e)
            return Outcome.rejected(e)

    return wrapper


def _log_rejection(operation: str, error: PortHubError) -> None:
    extra = {
        "error_code": error.code,
        "job_number": error.context.job_number,
        "account_id": error.context.account_id,
    }
    if error.severity == ErrorSeverity.CRITICAL:
        logger.error(f"{operation} failed: {error.message}", extra=extra)
    else:
        logger.info(f"{operation} rejected: {error.message}", extra=extra)
