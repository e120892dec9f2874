"""
Abstract base class for task rules.

All rules must implement this interface to be used with TaskEvaluator.
"""

from abc import ABC, abstractmethod
from enum import Enum

from expression_tasks.blendshapes import ExpressionSignals
from expression_tasks.state import TaskState


class RuleOutcome(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class TaskRule(ABC):
    """
    Decides, frame by frame, whether the active task has resolved.

    A rule keeps no state of its own. Everything that must survive between
    frames (hold timer, blink counter, latch) lives in the TaskState passed
    in, so a fresh TaskState is all it takes to restart a task.
    """

    @abstractmethod
    def evaluate(
        self, state: TaskState, signals: ExpressionSignals, dt_ms: float
    ) -> RuleOutcome:
        """
        Evaluate one frame.

        Parameters:
            state (TaskState): State of the active task; updated in place
                (hold_ms, progress, blink fields).
            signals (ExpressionSignals): Conditioned signals for the frame
                (smoothed smile and brow, raw kiss and blink).
            dt_ms (float): Time since the previous frame, already clamped
                to be non-negative.

        Returns:
            RuleOutcome: PENDING until the task succeeds or fails.
        """
        pass
