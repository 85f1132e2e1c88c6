"""@rule, @can and @cannot decorators — register rule functions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from sqla_ability._types import ConditionTree
from sqla_ability.rules._registry import RuleRegistry, get_default_registry

__all__ = ["can", "cannot", "rule", "unconditional"]

F = TypeVar("F", bound=Callable[..., ConditionTree])


def rule(
    resource_type: type,
    action: str,
    *,
    grants: bool = True,
    registry: RuleRegistry | None = None,
) -> Callable[[F], F]:
    """Decorator that registers a rule function for (model, action).

    The decorated function receives an actor and returns a condition
    tree: a mapping of attribute names to values, or of relationship
    names to nested condition trees. Return ``{}`` for an unconditional
    rule.

    Args:
        resource_type: The SQLAlchemy model class.
        action: The action string (e.g., "read", "update").
        grants: ``True`` registers an allow rule, ``False`` a deny rule.
        registry: Optional custom registry. Defaults to the global registry.

    Returns:
        A decorator that registers the function and returns it unchanged.

    Example::

        @rule(Post, "read")
        def own_posts(actor: User) -> dict:
            return {"author_id": actor.id}

        @rule(Post, "read", grants=False)
        def hide_locked(actor: User) -> dict:
            return {"locked": True}
    """

    def decorator(fn: F) -> F:
        target = registry if registry is not None else get_default_registry()
        target.register(
            resource_type,
            action,
            fn,
            grants=grants,
            name=fn.__name__,
            description=fn.__doc__ or "",
        )
        return fn

    return decorator


def can(
    resource_type: type,
    action: str,
    *,
    registry: RuleRegistry | None = None,
) -> Callable[[F], F]:
    """Register an allow rule. Shorthand for ``rule(..., grants=True)``.

    Example::

        @can(Post, "read")
        def published(actor):
            return {"is_published": True}
    """
    return rule(resource_type, action, grants=True, registry=registry)


def cannot(
    resource_type: type,
    action: str,
    *,
    registry: RuleRegistry | None = None,
) -> Callable[[F], F]:
    """Register a deny rule. Shorthand for ``rule(..., grants=False)``.

    Example::

        @cannot(Post, "read")
        def not_locked(actor):
            return {"locked": True}
    """
    return rule(resource_type, action, grants=False, registry=registry)


def unconditional(actor: Any) -> ConditionTree:
    """Rule function with no conditions, for allow-all or deny-all rules.

    Example::

        registry.register(Post, "read", unconditional, name="all", description="")
    """
    return {}
