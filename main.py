"""
Command-line entry point for the courseware data layer.

Owns the session lifecycle: loads configuration, sets up logging and
Sentry, builds the CoursewareContext, runs the requested fetches, prints
the resulting statuses and closes the client.

Run with: python main.py COURSE_ID [--sequence SEQUENCE_ID] [--position N]
"""

import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent

# Load .env.local first (if exists), then .env as fallback
load_dotenv(project_root / ".env.local")
load_dotenv()

import sentry_sdk

from courseware import (
    FetchStatus,
    ModelType,
    ResourceKind,
    create_context,
    fetch_course,
    fetch_sequence,
    save_sequence_position,
)
from courseware.config import get_sentry_dsn, is_dev_mode


async def run(course_id: str, sequence_id: str | None, position: int | None) -> int:
    ctx = create_context()
    try:
        course_status = await fetch_course(ctx, course_id)
        print(f"course {course_id}: {course_status.value}")

        if sequence_id:
            sequence_status = await fetch_sequence(ctx, sequence_id)
            print(f"sequence {sequence_id}: {sequence_status.value}")
            if position is not None:
                saved = await save_sequence_position(ctx, course_id, sequence_id, position)
                stored = ctx.store.get_field(ModelType.sequences, sequence_id, "position")
                print(f"position saved={saved}, stored position={stored}")

        for model_type in (ModelType.sections, ModelType.sequences, ModelType.units):
            print(f"{model_type.value}: {len(ctx.store.get_type(model_type))}")
    finally:
        await ctx.aclose()

    return 0 if ctx.status.current_status(ResourceKind.course) is FetchStatus.loaded else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch courseware data from the LMS")
    parser.add_argument("course_id", help="Course key, e.g. course-v1:edX+DemoX+Demo_Course")
    parser.add_argument("--sequence", help="Sequence usage key to load after the course")
    parser.add_argument(
        "--position",
        type=int,
        help="Save this position in the sequence (requires --sequence)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if is_dev_mode() else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dsn = get_sentry_dsn()
    if dsn:
        sentry_sdk.init(dsn=dsn)

    return asyncio.run(run(args.course_id, args.sequence, args.position))


if __name__ == "__main__":
    raise SystemExit(main())
