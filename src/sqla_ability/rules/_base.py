"""Rule and RuleRegistration dataclasses."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqla_ability._types import ConditionTree

__all__ = ["Rule", "RuleRegistration"]


@dataclass(frozen=True, slots=True)
class Rule:
    """A single allow or deny assertion over a condition tree.

    Rules are consumed in order: position in the list decides where the
    rule is folded into the compiled filter, not a priority weight.

    Attributes:
        grants: ``True`` for an allow rule, ``False`` for a deny rule.
        conditions: Attribute/relationship constraints. Empty means the
            rule is unconditional.
        name: Label used in audit logging.

    Example::

        Rule(grants=True, conditions={"author": {"org_id": 3}})
        Rule(grants=False, conditions={"locked": True})
    """

    grants: bool
    conditions: ConditionTree = field(default_factory=dict)
    name: str = ""

    @property
    def unconditional(self) -> bool:
        """Whether the rule carries no conditions at all."""
        return not self.conditions


@dataclass(frozen=True, slots=True)
class RuleRegistration:
    """A registered rule function with its metadata.

    Attributes:
        resource_type: The SQLAlchemy model class this rule applies to.
        action: The action string (e.g., "read", "update", "delete").
        fn: Takes an actor and returns the rule's condition tree.
        grants: Polarity of the produced rule.
        name: The rule function name (for debugging/logging).
        description: Human-readable description (from docstring).
    """

    resource_type: type
    action: str
    fn: Callable[..., ConditionTree]
    grants: bool
    name: str
    description: str

    def build(self, actor: Any) -> Rule:
        """Call the rule function for *actor* and wrap the result in a ``Rule``."""
        return Rule(grants=self.grants, conditions=self.fn(actor), name=self.name)
