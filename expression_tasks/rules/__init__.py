"""
Per-task evaluation rules.

Three families cover the catalog:
- HoldRule: a condition held continuously for a target duration
- TriggerRule: resolves on the first frame a condition is seen
- BlinkRule: counts complete blinks
"""

from expression_tasks.rules.base import RuleOutcome, TaskRule
from expression_tasks.rules.hold_rule import DontSmileRule, HoldRule
from expression_tasks.rules.trigger_rule import TriggerRule
from expression_tasks.rules.blink_rule import BlinkRule
from expression_tasks.rules.factory import build_rule

__all__ = [
    "RuleOutcome",
    "TaskRule",
    "HoldRule",
    "DontSmileRule",
    "TriggerRule",
    "BlinkRule",
    "build_rule",
]
