"""Enum definitions shared by the courseware data layer."""

import enum


class FetchStatus(str, enum.Enum):
    idle = "idle"
    pending = "pending"
    loaded = "loaded"
    denied = "denied"
    failed = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (FetchStatus.loaded, FetchStatus.denied, FetchStatus.failed)


class ResourceKind(str, enum.Enum):
    """Kinds of resource whose fetch lifecycle is tracked."""

    course = "course"
    sequence = "sequence"
    course_home = "course_home"


class ModelType(str, enum.Enum):
    """Entity types held in the model store."""

    courses = "courses"
    sections = "sections"
    sequences = "sequences"
    units = "units"
    course_home_meta = "courseHomeMeta"
    dates = "dates"
    outline = "outline"
