"""
Task catalog and selector.

The catalog is static: six micro-challenges, each with a prompt and the
messages shown when it resolves. The selector draws the next task uniformly
from every task except the one just played.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


class TaskId(str, Enum):
    SMILE = "smile"
    KISS = "kiss"
    DONT_SMILE = "dont_smile"
    ANGER = "anger"
    POKER_FACE = "poker_face"
    BLINK = "blink"


class EvaluationMode(str, Enum):
    """How a task decides success or failure."""
    HOLD = "hold"          # condition sustained for hold_duration_ms
    INSTANT = "instant"    # resolves on the first qualifying frame
    EDGE = "edge"          # counts discrete transitions


@dataclass(frozen=True)
class Task:
    """A single micro-challenge."""
    id: TaskId
    label: str
    mode: EvaluationMode
    success_message: str
    failure_message: str = ""


DEFAULT_CATALOG = (
    Task(TaskId.SMILE, "Hold a smile", EvaluationMode.HOLD, "Great smile!"),
    Task(TaskId.KISS, "Blow a kiss", EvaluationMode.INSTANT, "Mwah! Kiss received!"),
    Task(
        TaskId.DONT_SMILE,
        "Don't smile",
        EvaluationMode.INSTANT,
        "Nerves of steel!",
        failure_message="You smiled!",
    ),
    Task(TaskId.ANGER, "Look angry", EvaluationMode.HOLD, "Scary! Well done."),
    Task(TaskId.POKER_FACE, "Poker face", EvaluationMode.HOLD, "Unreadable. Nice."),
    Task(TaskId.BLINK, "Blink twice", EvaluationMode.EDGE, "Blink, blink. Done!"),
)

_CATALOG_BY_ID: Dict[TaskId, Task] = {task.id: task for task in DEFAULT_CATALOG}


def get_task(task_id) -> Task:
    """Look up a task from the default catalog by id (enum or string)."""
    return _CATALOG_BY_ID[TaskId(task_id)]


def catalog_for(task_ids: Sequence[str]) -> tuple:
    """Build a catalog restricted to the given ids, in default catalog order."""
    wanted = {TaskId(task_id) for task_id in task_ids}
    return tuple(task for task in DEFAULT_CATALOG if task.id in wanted)


class TaskSelector:
    """
    Draws tasks uniformly at random without immediate repeats.

    The next task is picked from the complement of the current one, so a
    draw always terminates in a single step regardless of catalog size.

    Usage:
        selector = TaskSelector(seed=7)
        task = selector.draw_next(None)
        task = selector.draw_next(task.id)
    """

    def __init__(self, catalog: Sequence[Task] = DEFAULT_CATALOG, seed: Optional[int] = None):
        """
        Args:
            catalog: Tasks to choose from
            seed: Optional seed for reproducible sequences

        Raises:
            ValueError: If the catalog is empty
        """
        if not catalog:
            raise ValueError("Task catalog must contain at least one task")

        self.catalog = tuple(catalog)
        self._rng = np.random.default_rng(seed)

        if len(self.catalog) == 1:
            logger.warning(
                f"Catalog has a single task ({self.catalog[0].id.value}); "
                "it will repeat"
            )

    def find(self, task_id) -> Task:
        """
        Look up a task of this catalog by id (enum or string).

        Raises:
            ValueError: If the id is unknown or not part of this catalog
        """
        task_id = TaskId(task_id)
        for task in self.catalog:
            if task.id is task_id:
                return task
        raise ValueError(
            f"Task '{task_id.value}' is not in the configured catalog "
            f"{[task.id.value for task in self.catalog]}"
        )

    def draw_next(self, current_id: Optional[TaskId] = None) -> Task:
        """
        Pick the next task.

        Args:
            current_id: Id of the active task, or None at session start

        Returns:
            A task whose id differs from current_id whenever the catalog
            holds at least two tasks
        """
        candidates = [task for task in self.catalog if task.id != current_id]
        if not candidates:
            # single-entry catalog
            return self.catalog[0]

        index = int(self._rng.integers(len(candidates)))
        return candidates[index]
