"""
Error reporting for the courseware data layer.

Orchestrators never raise request failures to their callers. Instead they
hand the original exception to a reporter (report_error by default) and
move on. Reporting is fire-and-forget: nothing here raises or returns a
value callers depend on.
"""

import logging
from typing import Callable

import sentry_sdk

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[BaseException], None]


def report_error(error: BaseException) -> None:
    """Log an error and forward it to Sentry."""
    logger.error(f"{type(error).__name__}: {error}")
    sentry_sdk.capture_exception(error)


def report_info(message: str) -> None:
    """Log an informational message about unexpected but harmless data."""
    logger.info(message)
