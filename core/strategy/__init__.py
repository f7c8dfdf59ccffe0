"""Strategy tables and table rules."""

from core.strategy.rules import RuleSet
from core.strategy.basic import (
    Action,
    ActionFlags,
    Assessment,
    BasicStrategy,
    Recommendation,
    recommend,
    score_action,
)

__all__ = [
    "RuleSet",
    "Action",
    "ActionFlags",
    "Assessment",
    "BasicStrategy",
    "Recommendation",
    "recommend",
    "score_action",
]
