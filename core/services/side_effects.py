# =============================================================================
# core/services/side_effects.py - Post-Commit Task Queue
# =============================================================================
# Best-effort work that follows an authoritative state change (notification
# rows, emails). Tasks are queued while the change is prepared and run only
# after it has been persisted. A failing task is logged and skipped; it never
# reaches the caller and never undoes the change.
#
# Usage:
#   queue = PostCommitQueue("asset.approve")
#   queue.add("notification", notifications.create, notification)
#   ... persist the change ...
#   dispatch(queue)  # inline, or handed to BackgroundTasks by the API
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class SideEffectTask:
    """One queued call."""
    name: str
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict[str, Any] = field(default_factory=dict)


@dataclass
class SideEffectOutcome:
    """Result of running one task."""
    name: str
    succeeded: bool
    error: str | None = None


class PostCommitQueue:
    """
    Ordered list of best-effort tasks tied to one operation.

    `run()` executes every task even if earlier ones fail and reports what
    happened; it does not raise.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self._tasks: list[SideEffectTask] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def add(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue `func(*args, **kwargs)` under a name used in logs."""
        self._tasks.append(SideEffectTask(name=name, func=func, args=args, kwargs=kwargs))

    def run(self) -> list[SideEffectOutcome]:
        """Run all queued tasks in order, swallowing and logging failures."""
        outcomes = []
        for task in self._tasks:
            try:
                result = task.func(*task.args, **task.kwargs)
            except Exception as e:
                logger.error(
                    f"Side effect '{task.name}' of {self.operation} failed: {e}",
                    exc_info=True,
                )
                outcomes.append(SideEffectOutcome(name=task.name, succeeded=False, error=str(e)))
                continue

            # Dispatchers that report failure by returning False
            if result is False:
                logger.error(f"Side effect '{task.name}' of {self.operation} reported failure")
                outcomes.append(SideEffectOutcome(name=task.name, succeeded=False, error="reported failure"))
            else:
                outcomes.append(SideEffectOutcome(name=task.name, succeeded=True))

        self._tasks.clear()
        return outcomes


def run_inline(queue: PostCommitQueue) -> None:
    """Default dispatcher: run the queue right away, in the caller's thread."""
    queue.run()


Dispatcher = Callable[[PostCommitQueue], None]
