"""
Courseware data layer - fetch orchestration, normalized entity store,
and optimistic mutations for the course-viewing experience.
"""

# Store and status
from .model_store import ModelStore, ModelEvent
from .status import ResourceStatusTracker, StatusEvent, FetchAttempt
from .enums import FetchStatus, ResourceKind, ModelType

# Collaborators
from .http_client import LmsClient
from .context import CoursewareContext, create_context
from .reporting import report_error, report_info

# Errors
from .errors import (
    CoursewareError, NetworkFailure, RequestFailure, ParseFailure,
    ResourceNotLoadedError,
)

# Orchestration
from .orchestrator import FetchRequest, FetchOutcome, run_fetch
from .mutations import PendingMutation, apply_optimistic

# Thunks
from .thunks import (
    fetch_course, fetch_sequence, check_block_completion,
    save_sequence_position, require_loaded,
)
from .course_home import fetch_tab, fetch_dates_tab, fetch_outline_tab, reset_deadlines

__all__ = [
    # Store and status
    'ModelStore', 'ModelEvent', 'ResourceStatusTracker', 'StatusEvent',
    'FetchAttempt', 'FetchStatus', 'ResourceKind', 'ModelType',
    # Collaborators
    'LmsClient', 'CoursewareContext', 'create_context', 'report_error', 'report_info',
    # Errors
    'CoursewareError', 'NetworkFailure', 'RequestFailure', 'ParseFailure',
    'ResourceNotLoadedError',
    # Orchestration
    'FetchRequest', 'FetchOutcome', 'run_fetch', 'PendingMutation', 'apply_optimistic',
    # Thunks
    'fetch_course', 'fetch_sequence', 'check_block_completion',
    'save_sequence_position', 'require_loaded',
    'fetch_tab', 'fetch_dates_tab', 'fetch_outline_tab', 'reset_deadlines',
]
