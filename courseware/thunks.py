"""
Courseware fetch and mutation thunks.

These are the operations the UI triggers: load a course (metadata + block
tree), load a sequence, check a unit's completion, save the position inside
a sequence. None of them raise on request failures; the outcome is visible
through ctx.status and ctx.store, and errors go to ctx.log_error.

check_block_completion and save_sequence_position read ids out of records a
previous fetch_sequence put in the store. Calling them before that fetch has
loaded is the caller's mistake: they log a warning and carry on. Callers who
prefer to fail fast can call require_loaded() first.
"""

import logging

from . import api
from .context import CoursewareContext
from .enums import FetchStatus, ModelType, ResourceKind
from .errors import ResourceNotLoadedError
from .mutations import apply_optimistic
from .normalizers import has_courseware_access
from .orchestrator import FetchOutcome, FetchRequest, run_fetch

logger = logging.getLogger(__name__)


def _apply_course_metadata(ctx: CoursewareContext, metadata: dict) -> None:
    ctx.store.merge(ModelType.courses, metadata["id"], metadata)


def _apply_course_blocks(ctx: CoursewareContext, models: dict) -> None:
    ctx.store.merge_map(ModelType.courses, models["courses"])
    ctx.store.merge_map(ModelType.sections, models["sections"])
    ctx.store.merge_map(ModelType.sequences, models["sequences"])
    ctx.store.merge_map(ModelType.units, models["units"])


def _apply_sequence_metadata(ctx: CoursewareContext, data: dict) -> None:
    ctx.store.merge(ModelType.sequences, data["sequence"]["id"], data["sequence"])
    ctx.store.merge_many(ModelType.units, data["units"])


def _classify_course(
    ctx: CoursewareContext, outcomes: dict[str, FetchOutcome]
) -> FetchStatus:
    if not all(o.ok for o in outcomes.values() if o.critical):
        return FetchStatus.failed
    if not has_courseware_access(outcomes["metadata"].value):
        return FetchStatus.denied
    return FetchStatus.loaded


async def fetch_course(ctx: CoursewareContext, course_id: str) -> FetchStatus:
    """Load course metadata and the course block tree concurrently.

    Terminal status:
    - failed if either request failed (whatever the other one returned)
    - denied if both succeeded but the metadata refuses courseware access
    - loaded otherwise
    """
    return await run_fetch(
        ctx,
        ResourceKind.course,
        course_id,
        [
            FetchRequest(
                name="metadata",
                call=lambda: api.get_course_metadata(ctx.client, course_id),
                apply=_apply_course_metadata,
            ),
            FetchRequest(
                name="blocks",
                call=lambda: api.get_course_blocks(ctx.client, course_id),
                apply=_apply_course_blocks,
            ),
        ],
        classify=_classify_course,
    )


async def fetch_sequence(ctx: CoursewareContext, sequence_id: str) -> FetchStatus:
    """Load sequence metadata, merging onto any sequence/unit records already known."""
    return await run_fetch(
        ctx,
        ResourceKind.sequence,
        sequence_id,
        [
            FetchRequest(
                name="sequence",
                call=lambda: api.get_sequence_metadata(ctx.client, sequence_id),
                apply=_apply_sequence_metadata,
            ),
        ],
    )


def require_loaded(ctx: CoursewareContext, kind: ResourceKind, resource_id: str) -> None:
    """
    Raises:
        ResourceNotLoadedError: If the resource's fetch has not reached loaded.
    """
    status = ctx.status.get(kind, resource_id)
    if status is not FetchStatus.loaded:
        raise ResourceNotLoadedError(
            f"{kind.value} {resource_id} is {status.value}, expected loaded"
        )


def _warn_if_not_loaded(ctx: CoursewareContext, sequence_id: str) -> None:
    status = ctx.status.get(ResourceKind.sequence, sequence_id)
    if status is not FetchStatus.loaded:
        logger.warning(
            f"Sequence {sequence_id} is {status.value}; "
            "dependent call relies on data that may be missing"
        )


async def check_block_completion(
    ctx: CoursewareContext, course_id: str, sequence_id: str, unit_id: str
) -> None:
    """Refresh a unit's ``complete`` flag from the LMS.

    Units never become incomplete again, so an already complete unit is not
    re-checked.
    """
    _warn_if_not_loaded(ctx, sequence_id)
    if ctx.store.get_field(ModelType.units, unit_id, "complete"):
        return

    try:
        is_complete = await api.get_block_completion(
            ctx.client, course_id, sequence_id, unit_id
        )
    except Exception as e:
        ctx.log_error(e)
        return

    ctx.store.merge(ModelType.units, unit_id, {"complete": is_complete})


async def save_sequence_position(
    ctx: CoursewareContext, course_id: str, sequence_id: str, position: int
) -> bool:
    """Move a sequence to a new position, optimistically.

    The store shows the new position right away. If the LMS rejects the
    write (or cannot be reached) the previous position is restored.

    Returns True if the position was saved.
    """
    _warn_if_not_loaded(ctx, sequence_id)
    return await apply_optimistic(
        ctx,
        ModelType.sequences,
        sequence_id,
        "position",
        position,
        request=lambda: api.post_sequence_position(
            ctx.client, course_id, sequence_id, position
        ),
    )
