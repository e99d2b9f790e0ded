"""
Optimistic store mutations with rollback.

The new value is merged into the store before the write request is even
issued, so readers see it immediately. If the request fails the previous
value is merged back and the failure is reported. Either way, once the
call returns the store holds a settled value: the new one on success, the
exact pre-mutation one on failure.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .context import CoursewareContext

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class PendingMutation:
    """A single field change held only while its write request is in flight."""

    entity_type: str
    entity_id: str
    field: str
    previous_value: Any
    new_value: Any

    def apply(self, ctx: CoursewareContext) -> None:
        ctx.store.merge(self.entity_type, self.entity_id, {self.field: self.new_value})

    def rollback(self, ctx: CoursewareContext) -> None:
        previous = None if self.previous_value is _MISSING else self.previous_value
        ctx.store.merge(self.entity_type, self.entity_id, {self.field: previous})


async def apply_optimistic(
    ctx: CoursewareContext,
    entity_type: str,
    entity_id: str,
    field: str,
    new_value: Any,
    request: Callable[[], Awaitable[Any]],
    confirm: Callable[[Any], dict[str, Any] | None] | None = None,
) -> bool:
    """Apply a field change now, then confirm it with a write request.

    A successful write changes nothing else in the store except the fields
    returned by confirm, so an older write settling late never overwrites a
    newer optimistic value.

    Args:
        request: zero-argument callable issuing the write
        confirm: optional projection of the response to extra server-confirmed
            fields to merge on success

    Returns:
        True if the write succeeded, False if it failed and was rolled back.
    """
    mutation = PendingMutation(
        entity_type=entity_type,
        entity_id=entity_id,
        field=field,
        previous_value=ctx.store.get_field(entity_type, entity_id, field, _MISSING),
        new_value=new_value,
    )
    mutation.apply(ctx)

    try:
        response = await request()
    except Exception as e:
        logger.warning(
            f"Rolling back {entity_type}/{entity_id}.{field} after failed write"
        )
        mutation.rollback(ctx)
        ctx.log_error(e)
        return False

    if confirm is not None:
        try:
            confirmed = confirm(response)
        except Exception as e:
            ctx.log_error(e)
            confirmed = None
        if confirmed:
            ctx.store.merge(entity_type, entity_id, confirmed)
    return True
