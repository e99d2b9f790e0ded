"""
Per-resource fetch status tracking.

Each tracked resource (a course, a sequence, a course-home tab set) moves
through idle -> pending -> loaded | denied | failed. Every fetch attempt
re-enters pending. Transitions are published to subscribers as StatusEvents.

Overlapping fetches of the same resource are not deduplicated. Instead each
begin() hands out a monotonically increasing attempt number, and finish()
for an attempt that has since been superseded is ignored, so the most
recently started attempt always owns the terminal status.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from .enums import FetchStatus, ResourceKind
from .reporting import ErrorReporter, report_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchAttempt:
    """Handle returned by begin(); pass it back to finish()."""

    kind: ResourceKind
    resource_id: str
    attempt: int


@dataclass(frozen=True)
class StatusEvent:
    kind: ResourceKind
    resource_id: str
    status: FetchStatus
    attempt: int


StatusListener = Callable[[StatusEvent], None]


class ResourceStatusTracker:
    """Holds the current FetchStatus of every resource that has been fetched."""

    def __init__(self, log_error: ErrorReporter = report_error):
        self.log_error = log_error
        self._statuses: dict[tuple[ResourceKind, str], FetchStatus] = {}
        self._attempts: dict[tuple[ResourceKind, str], int] = {}
        self._current: dict[ResourceKind, str] = {}
        self._listeners: list[StatusListener] = []

    def begin(self, kind: ResourceKind, resource_id: str) -> FetchAttempt:
        """Move a resource to pending and return the new attempt handle."""
        key = (kind, resource_id)
        attempt = self._attempts.get(key, 0) + 1
        self._attempts[key] = attempt
        self._current[kind] = resource_id
        self._set(kind, resource_id, FetchStatus.pending, attempt)
        return FetchAttempt(kind, resource_id, attempt)

    def finish(self, attempt: FetchAttempt, status: FetchStatus) -> bool:
        """Record the terminal status of an attempt.

        Returns False (and changes nothing) when a newer attempt for the same
        resource has started since this one began.

        Raises:
            ValueError: If status is not loaded, denied or failed.
        """
        if not status.is_terminal:
            raise ValueError(f"{status.value} is not a terminal fetch status")

        key = (attempt.kind, attempt.resource_id)
        latest = self._attempts.get(key, 0)
        if attempt.attempt != latest:
            logger.debug(
                f"Ignoring stale {status.value} for {attempt.kind.value} "
                f"{attempt.resource_id} (attempt {attempt.attempt}, latest {latest})"
            )
            return False

        self._set(attempt.kind, attempt.resource_id, status, attempt.attempt)
        return True

    def get(self, kind: ResourceKind, resource_id: str) -> FetchStatus:
        return self._statuses.get((kind, resource_id), FetchStatus.idle)

    def current(self, kind: ResourceKind) -> str | None:
        """Id of the resource of this kind whose fetch started most recently."""
        return self._current.get(kind)

    def current_status(self, kind: ResourceKind) -> FetchStatus:
        resource_id = self.current(kind)
        if resource_id is None:
            return FetchStatus.idle
        return self.get(kind, resource_id)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a transition listener. Returns a function that unsubscribes it.

        A listener that raises does not stop the transition or the remaining
        listeners; its exception goes to log_error.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(
        self, kind: ResourceKind, resource_id: str, status: FetchStatus, attempt: int
    ) -> None:
        self._statuses[(kind, resource_id)] = status
        event = StatusEvent(kind, resource_id, status, attempt)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.log_error(e)
