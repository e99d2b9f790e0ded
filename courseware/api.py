"""LMS endpoints consumed by the courseware data layer.

Every function takes the LmsClient explicitly and returns data already
projected by the normalizers. Errors from the client propagate unchanged;
deciding what a failure means is the orchestrators' job.
"""

from typing import Any

from .config import get_block_tree_depth, get_username
from .http_client import LmsClient
from .normalizers import (
    camel_case_object,
    normalize_blocks,
    normalize_course_metadata,
    normalize_sequence_metadata,
)

BLOCK_REQUESTED_FIELDS = (
    "children,show_gated_sections,graded,special_exam_info,has_scheduled_content"
)


def _xmodule_handler_url(
    client: LmsClient, course_id: str, sequence_id: str, handler: str
) -> str:
    return client.url(
        f"/courses/{course_id}/xblock/{sequence_id}/handler/xmodule_handler/{handler}"
    )


async def get_course_metadata(client: LmsClient, course_id: str) -> dict:
    url = client.url(f"/api/courseware/course/{course_id}")
    metadata = normalize_course_metadata(await client.get_json(url))
    metadata["id"] = course_id
    return metadata


async def get_course_blocks(client: LmsClient, course_id: str) -> dict:
    """Fetch the block tree visible to the configured user, split by type."""
    params: dict[str, Any] = {
        "course_id": course_id,
        "depth": get_block_tree_depth(),
        "requested_fields": BLOCK_REQUESTED_FIELDS,
        "student_view_data": "video,discussion",
        "block_counts": "video",
    }
    username = get_username()
    if username:
        params["username"] = username
    else:
        params["all_blocks"] = "true"

    payload = await client.get_json(client.url("/api/courses/v2/blocks/"), params=params)
    return normalize_blocks(course_id, payload)


async def get_sequence_metadata(client: LmsClient, sequence_id: str) -> dict:
    url = client.url(f"/api/courseware/sequence/{sequence_id}")
    return normalize_sequence_metadata(await client.get_json(url))


async def get_block_completion(
    client: LmsClient, course_id: str, sequence_id: str, usage_key: str
) -> bool:
    """Ask the LMS whether a unit is complete."""
    url = _xmodule_handler_url(client, course_id, sequence_id, "get_completion")
    data = await client.post_json(url, {"usage_key": usage_key})
    return isinstance(data, dict) and data.get("complete") is True


async def post_sequence_position(
    client: LmsClient, course_id: str, sequence_id: str, position: int
) -> Any:
    url = _xmodule_handler_url(client, course_id, sequence_id, "goto_position")
    return await client.post_json(url, {"position": position})


async def get_course_home_metadata(client: LmsClient, course_id: str) -> dict:
    url = client.url(f"/api/course_home/v1/course_metadata/{course_id}")
    return camel_case_object(await client.get_json(url))


async def get_dates_tab_data(client: LmsClient, course_id: str) -> dict:
    url = client.url(f"/api/course_home/v1/dates/{course_id}")
    return camel_case_object(await client.get_json(url))


async def get_outline_tab_data(client: LmsClient, course_id: str) -> dict:
    url = client.url(f"/api/course_home/v1/outline/{course_id}")
    return camel_case_object(await client.get_json(url))


async def update_course_deadlines(client: LmsClient, course_id: str) -> Any:
    url = client.url("/api/course_experience/v1/reset_course_deadlines")
    return await client.post_json(url, {"course_key": course_id})
