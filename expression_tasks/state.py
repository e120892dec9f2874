"""Mutable per-task state owned by the task evaluator."""

from dataclasses import dataclass
from typing import Optional

from .tasks import Task


@dataclass
class TaskState:
    """State of the active task.

    Created when a task is drawn, updated once per evaluated frame and
    discarded when the next task is drawn.

    Attributes:
        task: The active task
        hold_ms: Time the hold condition has been continuously true
        progress: Completion fraction in [0, 1]
        completed: Task succeeded
        failed: Task failed (drives the "shake" feedback)
        blink_count: Completed blinks so far
        eye_closed: Blink latch, set while the eyes are closed
        last_timestamp_ms: Timestamp of the previous evaluated frame
    """
    task: Task
    hold_ms: float = 0.0
    progress: float = 0.0
    completed: bool = False
    failed: bool = False
    blink_count: int = 0
    eye_closed: bool = False
    last_timestamp_ms: Optional[float] = None

    @property
    def resolved(self) -> bool:
        return self.completed or self.failed
