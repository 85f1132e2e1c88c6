"""RuleRegistry — stores rule registrations in definition order."""

from __future__ import annotations

from collections.abc import Callable

from sqla_ability._types import ConditionTree
from sqla_ability.rules._base import RuleRegistration

__all__ = ["RuleRegistry", "get_default_registry"]


class RuleRegistry:
    """Registry that maps (model, action) pairs to ordered rule functions.

    Thread-safe for reads after startup. Append-only during registration.

    Example::

        registry = RuleRegistry()
        registry.register(Post, "read", lambda actor: {"is_published": True},
                          name="published", description="")
        rules = registry.lookup(Post, "read")
    """

    def __init__(self) -> None:
        self._rules: dict[tuple[type, str], list[RuleRegistration]] = {}

    def register(
        self,
        resource_type: type,
        action: str,
        fn: Callable[..., ConditionTree],
        *,
        grants: bool = True,
        name: str,
        description: str,
    ) -> None:
        """Register a rule function for a (model, action) pair.

        Rules registered for the same key are compiled in registration
        order: allow rules are OR'd onto the filter built so far, deny
        rules are AND'd onto it.

        Args:
            resource_type: The SQLAlchemy model class.
            action: The action string (e.g., ``"read"``, ``"update"``).
            fn: A callable that takes an actor and returns a condition tree.
            grants: ``True`` for an allow rule, ``False`` for a deny rule.
            name: Human-readable name for the rule (used in logging).
            description: Description of the rule (typically the docstring).

        Example::

            registry = RuleRegistry()
            registry.register(
                Post, "read",
                lambda actor: {"author_id": actor.id},
                name="own_posts",
                description="Authors can read their own posts",
            )
        """
        registration = RuleRegistration(
            resource_type=resource_type,
            action=action,
            fn=fn,
            grants=grants,
            name=name,
            description=description,
        )
        key = (resource_type, action)
        if key not in self._rules:
            self._rules[key] = []
        self._rules[key].append(registration)

    def lookup(self, resource_type: type, action: str) -> list[RuleRegistration]:
        """Look up all rules for a (model, action) pair, in registration order.

        Returns a copy of the internal list so callers cannot mutate
        the registry state.
        """
        return list(self._rules.get((resource_type, action), []))

    def has_rules(self, resource_type: type, action: str) -> bool:
        """Check whether at least one rule exists for (model, action)."""
        return (resource_type, action) in self._rules

    def registered_entities(self, action: str) -> set[type]:
        """Return all entity types that have rules registered for *action*."""
        return {entity for entity, act in self._rules if act == action}

    def clear(self) -> None:
        """Remove all registered rules.

        Primarily useful in test teardown to reset the registry state
        between tests.
        """
        self._rules.clear()


# Module-level default registry (singleton).
_default_registry = RuleRegistry()


def get_default_registry() -> RuleRegistry:
    """Return the global default (singleton) rule registry.

    This is the registry used by ``@can``, ``@cannot``, ``accessible_query``,
    and other APIs when no explicit registry is provided.

    Example::

        registry = get_default_registry()
        registry.clear()  # reset between tests
    """
    return _default_registry
