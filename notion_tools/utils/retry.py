"""Retry policy for provider calls."""

import logging
from typing import Callable

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)


def transient_retrying(
    attempts: int,
    backoff: float,
    is_transient: Callable[[BaseException], bool],
    logger: logging.Logger,
) -> Retrying:
    """
    Build a retry controller for transient provider failures.

    The delay grows linearly: ``backoff`` after the first failure,
    ``2 * backoff`` after the second, and so on. Errors rejected by
    ``is_transient`` and the last failure are re-raised unchanged.

    Args:
        attempts: Total attempts, including the first call
        backoff: Base delay in seconds
        is_transient: Predicate selecting errors worth retrying
        logger: Logger receiving a warning before each retry
    """
    return Retrying(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_incrementing(start=backoff, increment=backoff),
        retry=retry_if_exception(is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
