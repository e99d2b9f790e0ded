"""Course-home tab fetches (dates, outline) and deadline resets."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from . import api
from .context import CoursewareContext
from .enums import FetchStatus, ModelType, ResourceKind
from .http_client import LmsClient
from .orchestrator import FetchRequest, run_fetch

logger = logging.getLogger(__name__)

TabDataGetter = Callable[[LmsClient, str], Awaitable[dict[str, Any]]]
TabRefetch = Callable[[CoursewareContext, str], Awaitable[FetchStatus]]


async def fetch_tab(
    ctx: CoursewareContext, course_id: str, tab: str, get_tab_data: TabDataGetter
) -> FetchStatus:
    """Load course-home metadata together with one tab's data.

    Both requests are required: the tab loads only if both succeed. Each
    successful payload is stored under the course id, in ``courseHomeMeta``
    and in the tab's own entity type respectively.
    """

    def apply_meta(ctx: CoursewareContext, data: dict) -> None:
        ctx.store.merge(ModelType.course_home_meta, course_id, data)

    def apply_tab(ctx: CoursewareContext, data: dict) -> None:
        ctx.store.merge(tab, course_id, data)

    return await run_fetch(
        ctx,
        ResourceKind.course_home,
        course_id,
        [
            FetchRequest(
                name="course_home_metadata",
                call=lambda: api.get_course_home_metadata(ctx.client, course_id),
                apply=apply_meta,
            ),
            FetchRequest(
                name=tab,
                call=lambda: get_tab_data(ctx.client, course_id),
                apply=apply_tab,
            ),
        ],
    )


async def fetch_dates_tab(ctx: CoursewareContext, course_id: str) -> FetchStatus:
    return await fetch_tab(ctx, course_id, ModelType.dates.value, api.get_dates_tab_data)


async def fetch_outline_tab(ctx: CoursewareContext, course_id: str) -> FetchStatus:
    return await fetch_tab(
        ctx, course_id, ModelType.outline.value, api.get_outline_tab_data
    )


def reset_deadlines(
    ctx: CoursewareContext, course_id: str, refetch: TabRefetch
) -> asyncio.Task:
    """Ask the LMS to shift the learner's deadlines, then refetch a tab.

    Runs detached: this returns as soon as the task is scheduled and the
    caller is not expected to wait for it. Observe the outcome through the
    tab's status. A failed reset is reported and no refetch happens.
    Must be called from inside a running event loop.
    """

    async def run() -> None:
        await api.update_course_deadlines(ctx.client, course_id)
        logger.info(f"Deadlines reset for {course_id}, refetching")
        await refetch(ctx, course_id)

    return ctx.spawn(run(), name=f"reset-deadlines-{course_id}")
