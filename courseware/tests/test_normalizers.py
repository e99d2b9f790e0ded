"""Tests for payload normalization."""

from unittest.mock import patch

import pytest

from courseware.errors import ParseFailure
from courseware.normalizers import (
    camel_case,
    camel_case_object,
    has_courseware_access,
    normalize_blocks,
    normalize_course_metadata,
    normalize_sequence_metadata,
)

from .factories import (
    COURSE_ID,
    build_block,
    build_course_blocks,
    build_course_metadata,
    build_sequence_metadata,
)


class TestCamelCase:
    """Test key conversion."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("can_load_courseware", "canLoadCourseware"),
            ("id", "id"),
            ("hasAccess", "hasAccess"),
            ("_private", "_private"),
            ("block_2_id", "block2Id"),
        ],
    )
    def test_camel_case(self, key, expected):
        assert camel_case(key) == expected

    def test_nested_dicts_and_lists(self):
        payload = {"tab_list": [{"tab_id": 1, "sub_items": {"is_hidden": False}}]}

        assert camel_case_object(payload) == {
            "tabList": [{"tabId": 1, "subItems": {"isHidden": False}}]
        }


class TestCourseMetadata:
    """Test course metadata normalization and access checks."""

    def test_access_signal_is_camel_cased(self):
        course = normalize_course_metadata(build_course_metadata(has_access=False))

        assert course["canLoadCourseware"]["hasAccess"] is False
        assert has_courseware_access(course) is False

    def test_missing_signal_grants_access(self):
        assert has_courseware_access({"id": COURSE_ID}) is True

    def test_rejects_non_object(self):
        with pytest.raises(ParseFailure):
            normalize_course_metadata(["not", "a", "course"])


class TestNormalizeBlocks:
    """Test block tree flattening."""

    def test_each_block_gets_its_own_record(self):
        unit = build_block(COURSE_ID, "vertical", "u1", graded=True)
        sequence = build_block(COURSE_ID, "sequential", "s1", children=[unit["id"]])
        models = normalize_blocks(COURSE_ID, build_course_blocks(COURSE_ID, unit, sequence))

        assert list(models["units"]) == [unit["id"]]
        assert models["units"][unit["id"]]["graded"] is True
        assert models["units"][unit["id"]]["sequenceId"] == sequence["id"]
        assert models["sequences"][sequence["id"]]["unitIds"] == [unit["id"]]

        [section_id] = models["sections"]
        assert models["sequences"][sequence["id"]]["sectionId"] == section_id
        assert models["sections"][section_id]["courseId"] == COURSE_ID
        assert models["courses"][COURSE_ID]["sectionIds"] == [section_id]

    def test_child_order_is_preserved(self):
        units = [build_block(COURSE_ID, "vertical", f"u{i}") for i in (3, 1, 2)]
        sequence = build_block(
            COURSE_ID, "sequential", "s1", children=[u["id"] for u in units]
        )
        payload = build_course_blocks(COURSE_ID, units[0], sequence)
        for unit in units:
            payload["blocks"][unit["id"]] = unit

        models = normalize_blocks(COURSE_ID, payload)

        assert models["sequences"][sequence["id"]]["unitIds"] == [u["id"] for u in units]

    def test_unexpected_block_type_is_reported_and_skipped(self):
        payload = build_course_blocks(COURSE_ID)
        html = build_block(COURSE_ID, "html", "h1")
        payload["blocks"][html["id"]] = html

        with patch("courseware.normalizers.report_info") as mock_report:
            models = normalize_blocks(COURSE_ID, payload)

        mock_report.assert_called_once()
        assert "html" in mock_report.call_args[0][0]
        assert all(html["id"] not in records for records in models.values())

    def test_missing_blocks_mapping(self):
        with pytest.raises(ParseFailure):
            normalize_blocks(COURSE_ID, {"root": "x"})


class TestNormalizeSequenceMetadata:
    """Test sequence metadata projection."""

    def test_sequence_and_units(self):
        unit = build_block(COURSE_ID, "vertical", "u1")
        sequence = build_block(COURSE_ID, "sequential", "s1", children=[unit["id"]])
        data = normalize_sequence_metadata(
            build_sequence_metadata(sequence, [unit], position=2)
        )

        assert data["sequence"]["id"] == sequence["id"]
        assert data["sequence"]["unitIds"] == [unit["id"]]
        assert data["sequence"]["position"] == 2
        assert data["sequence"]["activeUnitIndex"] == 1
        assert data["sequence"]["gatedContent"] == {
            "gated": False,
            "prereqId": None,
            "gatedSectionName": sequence["display_name"],
        }
        assert data["units"] == [
            {
                "id": unit["id"],
                "sequenceId": sequence["id"],
                "bookmarked": False,
                "complete": None,
                "title": unit["display_name"],
                "contentType": "other",
                "graded": False,
            }
        ]

    def test_missing_items(self):
        with pytest.raises(ParseFailure):
            normalize_sequence_metadata({"item_id": "s1"})
