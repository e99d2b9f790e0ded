"""Projection functions from LMS payloads to partial entity records.

Each function takes one raw response body and returns plain dicts ready to
be merged into the ModelStore. Nested trees are flattened: every block gets
its own record, and parent/child links are kept as id lists (``unitIds``,
``sequenceIds``, ...) plus a back-reference id on the child. That is what
lets a later sequence fetch add fields to a unit the block tree introduced.
"""

import re
from typing import Any

from .errors import ParseFailure
from .reporting import report_info

_SNAKE_SEGMENT = re.compile(r"_+([a-zA-Z0-9])")

EXPECTED_BLOCK_TYPES = ("course", "chapter", "sequential", "vertical")


def camel_case(key: str) -> str:
    """Convert a snake_case key to camelCase ("can_load" -> "canLoad")."""
    head, sep, _ = key.partition("_")
    if not sep or not head:
        return key
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), key)


def camel_case_object(value: Any) -> Any:
    """Recursively camel-case every dict key inside value."""
    if isinstance(value, dict):
        return {camel_case(k): camel_case_object(v) for k, v in value.items()}
    if isinstance(value, list):
        return [camel_case_object(item) for item in value]
    return value


def _require_dict(payload: Any, what: str) -> dict:
    if not isinstance(payload, dict):
        raise ParseFailure(what, f"expected an object, got {type(payload).__name__}")
    return payload


def normalize_course_metadata(payload: Any) -> dict:
    """Camel-cased course metadata record."""
    return camel_case_object(_require_dict(payload, "course metadata"))


def has_courseware_access(course: dict) -> bool:
    """Read the access signal from a normalized course record.

    A record without the signal is treated as granted; only an explicit
    ``hasAccess: false`` denies.
    """
    can_load = course.get("canLoadCourseware")
    if isinstance(can_load, dict):
        return can_load.get("hasAccess", True) is not False
    if isinstance(can_load, bool):
        return can_load
    return True


def normalize_blocks(course_id: str, payload: Any) -> dict[str, dict[str, dict]]:
    """Split a course block tree into per-type record maps.

    Returns {"courses": {...}, "sections": {...}, "sequences": {...},
    "units": {...}}, each keyed by id. The course record is keyed by
    course_id rather than its block usage key.
    """
    blocks = _require_dict(payload, "course blocks").get("blocks")
    if not isinstance(blocks, dict):
        raise ParseFailure("course blocks", "missing 'blocks' mapping")

    models: dict[str, dict[str, dict]] = {
        "courses": {},
        "sections": {},
        "sequences": {},
        "units": {},
    }

    for block in blocks.values():
        block_type = block.get("type")
        block_id = block.get("id")
        if block_type == "course":
            models["courses"][course_id] = {
                "id": course_id,
                "title": block.get("display_name"),
                "sectionIds": list(block.get("children") or []),
                "hasScheduledContent": block.get("has_scheduled_content"),
            }
        elif block_type == "chapter":
            models["sections"][block_id] = {
                "id": block_id,
                "title": block.get("display_name"),
                "sequenceIds": list(block.get("children") or []),
            }
        elif block_type == "sequential":
            models["sequences"][block_id] = {
                "id": block_id,
                "title": block.get("display_name"),
                "legacyWebUrl": block.get("legacy_web_url"),
                "unitIds": list(block.get("children") or []),
            }
        elif block_type == "vertical":
            models["units"][block_id] = {
                "id": block_id,
                "title": block.get("display_name"),
                "graded": block.get("graded"),
                "legacyWebUrl": block.get("legacy_web_url"),
            }
        else:
            report_info(
                f"Unexpected course block type: {block_type} with ID {block_id}. "
                f"Expected block types are {', '.join(EXPECTED_BLOCK_TYPES)}."
            )

    # Decorate children with a reference back to their parent
    _link_children(models["courses"], "sectionIds", models["sections"], "courseId")
    _link_children(models["sections"], "sequenceIds", models["sequences"], "sectionId")
    _link_children(models["sequences"], "unitIds", models["units"], "sequenceId")

    return models


def _link_children(
    parents: dict[str, dict], child_ids_field: str, children: dict[str, dict], parent_field: str
) -> None:
    for parent in parents.values():
        for child_id in parent[child_ids_field]:
            if child_id in children:
                children[child_id][parent_field] = parent["id"]


def normalize_sequence_metadata(payload: Any) -> dict:
    """Project sequence metadata into one sequence record and its unit records.

    Returns {"sequence": {...}, "units": [...]}. Unit order follows the
    payload's ``items``.
    """
    sequence = _require_dict(payload, "sequence metadata")
    try:
        sequence_id = sequence["item_id"]
        items = sequence["items"]
    except KeyError as e:
        raise ParseFailure("sequence metadata", f"missing field {e}") from e

    gated = sequence.get("gated_content") or {}
    position = sequence.get("position")

    return {
        "sequence": {
            "id": sequence_id,
            "blockType": sequence.get("tag"),
            "unitIds": [unit["id"] for unit in items],
            "bannerText": sequence.get("banner_text"),
            "format": sequence.get("format"),
            "title": sequence.get("display_name"),
            "gatedContent": {
                "gated": gated.get("gated", False),
                "prereqId": gated.get("prereq_id"),
                "gatedSectionName": gated.get("gated_section_name"),
            },
            "isTimeLimited": sequence.get("is_time_limited"),
            "position": position,
            "activeUnitIndex": position - 1 if isinstance(position, int) else 0,
            "saveUnitPosition": sequence.get("save_position"),
            "showCompletion": sequence.get("show_completion"),
        },
        "units": [
            {
                "id": unit["id"],
                "sequenceId": sequence_id,
                "bookmarked": unit.get("bookmarked", False),
                "complete": unit.get("complete"),
                "title": unit.get("page_title"),
                "contentType": unit.get("type"),
                "graded": unit.get("graded"),
            }
            for unit in items
        ],
    }
