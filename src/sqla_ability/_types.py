"""Shared protocols and type aliases for sqla-ability."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Literal, Protocol, runtime_checkable

from sqlalchemy import ColumnElement

__all__ = [
    "ActorLike",
    "Comparator",
    "ConditionTree",
    "FilterExpression",
    "JoinPath",
    "OnMissingRules",
]

# Valid values for AbilityConfig.on_missing_rules.
OnMissingRules = Literal["deny", "raise"]

# Attribute or relationship name -> scalar, enumerable, or nested tree.
ConditionTree = Mapping[str, Any]

# Relationship names from the root model, e.g. ("author", "organization").
JoinPath = tuple[str, ...]

# Leaf comparison: operator.eq for granting rules, IS DISTINCT FROM for denying ones.
Comparator = Callable[[Any, Any], Any]


@runtime_checkable
class ActorLike(Protocol):
    """Structural type for authorization actors.

    Any object with an ``id`` attribute satisfies this protocol.
    Works with SQLAlchemy models, dataclasses, Pydantic models,
    named tuples — no inheritance required.

    Example::

        @dataclass
        class User:
            id: int
            name: str

        user = User(id=1, name="Alice")
        assert isinstance(user, ActorLike)
    """

    @property
    def id(self) -> int | str: ...


# The output type of the predicate compiler.
FilterExpression = ColumnElement[bool]
