"""Session context shared by every orchestrator call.

The entry point creates one CoursewareContext per session and passes it to
the thunks. It bundles the collaborators an orchestrator needs: the LMS
client, the entity store, the status tracker and the error reporter.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Coroutine

from .http_client import LmsClient
from .model_store import ModelStore
from .reporting import ErrorReporter, report_error
from .status import ResourceStatusTracker

logger = logging.getLogger(__name__)


@dataclass
class CoursewareContext:
    client: LmsClient
    store: ModelStore = field(default_factory=ModelStore)
    status: ResourceStatusTracker = field(default_factory=ResourceStatusTracker)
    log_error: ErrorReporter = report_error
    # Strong references to detached tasks so they are not garbage collected mid-flight
    background_tasks: set[asyncio.Task] = field(default_factory=set)

    def __post_init__(self):
        # Listener errors from the store and tracker go to the same reporter
        self.store.log_error = self.log_error
        self.status.log_error = self.log_error

    def spawn(self, coro: Coroutine, name: str | None = None) -> asyncio.Task:
        """Run a coroutine as a detached task the caller does not wait for.

        Exceptions escaping the coroutine are reported through log_error.
        The returned task may still be awaited by callers that want to.
        """
        task = asyncio.create_task(coro, name=name)
        self.background_tasks.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self.background_tasks.discard(task)
        if task.cancelled():
            logger.info(f"Background task {task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            self.log_error(error)

    async def wait_for_background(self) -> None:
        """Wait until every detached task has settled."""
        while self.background_tasks:
            await asyncio.gather(*list(self.background_tasks), return_exceptions=True)

    async def aclose(self) -> None:
        await self.wait_for_background()
        await self.client.aclose()


def create_context(log_error: ErrorReporter = report_error) -> CoursewareContext:
    """Build a context from environment configuration."""
    return CoursewareContext(client=LmsClient(), log_error=log_error)
