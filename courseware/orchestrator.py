"""
Fan-out/fan-in fetch orchestration.

A logical fetch (e.g. "load course X") is a set of independent requests.
run_fetch() marks the resource pending, starts every request at once, and
waits for all of them to settle; one failing request never cancels or
short-circuits its siblings. Successful results are merged into the store
as they are applied, failures are handed to the error reporter, and the
resource then receives exactly one terminal status.

run_fetch() itself never raises for request failures.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from .context import CoursewareContext
from .enums import FetchStatus, ResourceKind

logger = logging.getLogger(__name__)


@dataclass
class FetchRequest:
    """One request inside a logical fetch.

    call: zero-argument callable returning the awaitable to run.
    apply: merges the request's result into the context's store.
    critical: when True, failure of this request fails the whole fetch.
    """

    name: str
    call: Callable[[], Awaitable[Any]]
    apply: Callable[[CoursewareContext, Any], None]
    critical: bool = True


@dataclass
class FetchOutcome:
    name: str
    critical: bool
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


Classifier = Callable[[CoursewareContext, dict[str, FetchOutcome]], FetchStatus]


def classify_all_succeeded(
    ctx: CoursewareContext, outcomes: dict[str, FetchOutcome]
) -> FetchStatus:
    """loaded when every critical request succeeded, otherwise failed."""
    if all(o.ok for o in outcomes.values() if o.critical):
        return FetchStatus.loaded
    return FetchStatus.failed


async def run_fetch(
    ctx: CoursewareContext,
    kind: ResourceKind,
    resource_id: str,
    requests: Sequence[FetchRequest],
    classify: Classifier = classify_all_succeeded,
) -> FetchStatus:
    """Run a logical fetch and drive its resource to a terminal status.

    Returns the status this attempt classified itself as. If a newer fetch
    of the same resource started meanwhile, the tracker keeps the newer
    attempt's status and this return value is informational only.

    Raises:
        ValueError: If requests is empty or two requests share a name. Both
            are programming errors, raised before the resource goes pending.
    """
    if not requests:
        raise ValueError("run_fetch needs at least one request")
    names = [request.name for request in requests]
    if len(set(names)) != len(names):
        raise ValueError(f"run_fetch request names must be unique: {names}")

    attempt = ctx.status.begin(kind, resource_id)

    results = await asyncio.gather(
        *(_invoke(request) for request in requests), return_exceptions=True
    )

    outcomes: dict[str, FetchOutcome] = {}
    for request, result in zip(requests, results):
        outcome = FetchOutcome(request.name, request.critical)
        if isinstance(result, Exception):
            outcome.error = result
        elif isinstance(result, BaseException):
            raise result
        else:
            outcome.value = result
            try:
                request.apply(ctx, result)
            except Exception as e:
                logger.warning(f"Could not apply {request.name} for {resource_id}")
                outcome.error = e

        if outcome.error is not None:
            ctx.log_error(outcome.error)
        outcomes[request.name] = outcome

    try:
        status = classify(ctx, outcomes)
    except Exception as e:
        ctx.log_error(e)
        status = FetchStatus.failed

    ctx.status.finish(attempt, status)
    logger.info(f"Fetch of {kind.value} {resource_id} finished: {status.value}")
    return status


async def _invoke(request: FetchRequest) -> Any:
    return await request.call()
