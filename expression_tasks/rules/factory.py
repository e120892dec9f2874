"""Builds the rule that evaluates each catalog task."""

from typing import Optional

from expression_tasks.config import EngineConfig
from expression_tasks.rules.base import RuleOutcome, TaskRule
from expression_tasks.rules.blink_rule import BlinkRule
from expression_tasks.rules.hold_rule import DontSmileRule, HoldRule
from expression_tasks.rules.trigger_rule import TriggerRule
from expression_tasks.tasks import TaskId


def build_rule(task_id: TaskId, config: Optional[EngineConfig] = None) -> TaskRule:
    """
    Create the rule for a task using the configured thresholds.

    Args:
        task_id: Task to build a rule for
        config: Engine configuration (defaults used if None)

    Returns:
        TaskRule instance

    Raises:
        ValueError: If the task id is unknown
    """
    c = config or EngineConfig()
    task_id = TaskId(task_id)

    if task_id is TaskId.SMILE:
        return HoldRule(
            lambda s: s.smile > c.smile_threshold,
            c.hold_duration_ms,
        )
    if task_id is TaskId.KISS:
        return TriggerRule(lambda s: s.kiss > c.kiss_threshold, RuleOutcome.SUCCEEDED)
    if task_id is TaskId.DONT_SMILE:
        return DontSmileRule(c.smile_threshold, c.hold_duration_ms)
    if task_id is TaskId.ANGER:
        return HoldRule(
            lambda s: s.brow > c.brow_threshold and s.smile < c.anger_smile_max,
            c.hold_duration_ms,
        )
    if task_id is TaskId.POKER_FACE:
        return HoldRule(
            lambda s: (
                s.smile < c.poker_face_max
                and s.brow < c.poker_face_max
                and s.kiss < c.poker_face_max
            ),
            c.hold_duration_ms,
        )
    if task_id is TaskId.BLINK:
        return BlinkRule(
            c.blink_close_threshold, c.blink_open_threshold, c.blink_target
        )

    raise ValueError(f"No rule for task {task_id}")
