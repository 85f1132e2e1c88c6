"""Rule evaluation — turn registered rule functions into ``Rule`` objects."""

from __future__ import annotations

from collections.abc import Mapping

from sqla_ability._types import ActorLike
from sqla_ability.exceptions import MalformedConditionTreeError
from sqla_ability.rules._base import Rule
from sqla_ability.rules._registry import RuleRegistry

__all__ = ["evaluate_rules"]


def evaluate_rules(
    registry: RuleRegistry,
    resource_type: type,
    action: str,
    actor: ActorLike,
) -> list[Rule]:
    """Call every rule function registered for (resource_type, action).

    Rules come back in registration order, which is the order the
    predicate compiler folds them in.

    Args:
        registry: The rule registry to look up.
        resource_type: The SQLAlchemy model class.
        action: The action string.
        actor: The current actor/principal.

    Returns:
        One ``Rule`` per registration. Empty when nothing is registered.

    Raises:
        MalformedConditionTreeError: If a rule function returns
            something other than a mapping.
    """
    rules: list[Rule] = []
    for registration in registry.lookup(resource_type, action):
        built = registration.build(actor)
        if not isinstance(built.conditions, Mapping):
            raise MalformedConditionTreeError(
                key=None,
                value=built.conditions,
                message=(
                    f"Rule {registration.name!r} for ({resource_type.__name__}, {action!r}) "
                    f"returned {type(built.conditions).__name__}, expected a mapping"
                ),
            )
        rules.append(built)
    return rules
