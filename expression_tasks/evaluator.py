"""
Task evaluator: runs the active task's rule once per frame.
"""

import logging
from typing import Optional

from .blendshapes import ExpressionSignals
from .config import EngineConfig
from .rules import RuleOutcome, TaskRule, build_rule
from .state import TaskState
from .tasks import Task

logger = logging.getLogger(__name__)


class TaskEvaluator:
    """Evaluates frames against the active task.

    Owns the TaskState for the current task and the rule that judges it.
    Frame deltas are derived from the supplied timestamps: the first frame of
    a task contributes no time, and an out-of-order timestamp contributes
    none either.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._rule: Optional[TaskRule] = None
        self._state: Optional[TaskState] = None

    def begin(self, task: Task) -> TaskState:
        """Start evaluating a task with fresh counters."""
        self._rule = build_rule(task.id, self.config)
        self._state = TaskState(task=task)
        logger.debug(f"Evaluating task {task.id.value}")
        return self._state

    def evaluate(self, signals: ExpressionSignals, timestamp_ms: float) -> RuleOutcome:
        """
        Evaluate one frame.

        Args:
            signals: Conditioned signals (smoothed smile and brow, raw kiss and blink)
            timestamp_ms: Frame timestamp in milliseconds

        Returns:
            Outcome for this frame. A task that already resolved is left
            untouched and reports PENDING.

        Raises:
            RuntimeError: If begin() has not been called
        """
        if self._state is None or self._rule is None:
            raise RuntimeError("No active task; call begin() first")

        state = self._state
        if state.resolved:
            return RuleOutcome.PENDING

        dt_ms = self._delta(state, timestamp_ms)
        outcome = self._rule.evaluate(state, signals, dt_ms)

        if outcome is RuleOutcome.SUCCEEDED:
            state.completed = True
            state.progress = 1.0
        elif outcome is RuleOutcome.FAILED:
            state.failed = True

        return outcome

    @staticmethod
    def _delta(state: TaskState, timestamp_ms: float) -> float:
        previous = state.last_timestamp_ms
        if previous is None:
            state.last_timestamp_ms = timestamp_ms
            return 0.0
        dt_ms = timestamp_ms - previous
        if dt_ms < 0:
            # newest timestamp wins
            logger.debug(f"Out-of-order timestamp ({dt_ms:.1f}ms), clamping to 0")
            return 0.0
        state.last_timestamp_ms = timestamp_ms
        return dt_ms

    @property
    def state(self) -> Optional[TaskState]:
        """State of the active task, or None before begin()."""
        return self._state
