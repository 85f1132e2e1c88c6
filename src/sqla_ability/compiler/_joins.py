"""Join planning — derive and attach the outer joins a rule set needs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Select
from sqlalchemy.orm import aliased

from sqla_ability._types import ConditionTree, JoinPath
from sqla_ability.compiler._schema import SchemaReflector, get_default_reflector

__all__ = ["JoinSet", "plan_joins"]


def plan_joins(conditions: ConditionTree) -> list[JoinPath]:
    """Return the relationship paths needed to reach every nested condition.

    Every key whose value is a nested mapping is a relationship to join;
    scalar-valued keys are plain attributes and need no join. Paths are
    listed in pre-order, so a parent always precedes its children. Anything
    that is not a mapping plans no joins; rejecting it is left to the
    predicate compiler.

    Example::

        plan_joins({"a": {"b": {"c": 3}}, "d": {"e": 4}})
        # [("a",), ("a", "b"), ("d",)]
    """
    paths: list[JoinPath] = []
    if not isinstance(conditions, Mapping):
        return paths
    for key, value in conditions.items():
        if isinstance(value, Mapping):
            paths.append((key,))
            paths.extend((key, *sub_path) for sub_path in plan_joins(value))
    return paths


class JoinSet:
    """Outer joins accumulated for one compile of one root model.

    Each joined path gets its own ``aliased()`` entity, so two paths that
    reach the same table (or a self-referential relationship) never
    collide. Adding a path that is already joined does nothing.

    Example::

        joins = JoinSet(Post)
        joins.add_all(plan_joins({"author": {"organization": {"id": 1}}}))
        stmt = joins.apply(select(Post))
        # SELECT ... FROM posts
        #   LEFT OUTER JOIN users AS users_1 ON users_1.id = posts.author_id
        #   LEFT OUTER JOIN organizations AS organizations_1 ON ...
    """

    def __init__(self, model: type, *, reflector: SchemaReflector | None = None) -> None:
        self.model = model
        self.reflector = reflector if reflector is not None else get_default_reflector()
        # path -> (target model, aliased entity); insertion order is join order
        self._joined: dict[JoinPath, tuple[type, Any]] = {}

    def __contains__(self, path: object) -> bool:
        return path == () or path in self._joined

    def __len__(self) -> int:
        return len(self._joined)

    @property
    def paths(self) -> list[JoinPath]:
        """Joined paths, in the order they will be joined."""
        return list(self._joined)

    def add(self, path: JoinPath) -> None:
        """Ensure an outer join exists along *path*, parents first.

        Raises:
            SchemaMismatchError: If a relationship on the path does not exist.
        """
        path = tuple(path)
        if not path or path in self._joined:
            return
        parent = path[:-1]
        self.add(parent)
        target = self.reflector.resolve_relation(self.model_for(parent), path[-1])
        self._joined[path] = (target, aliased(target))

    def add_all(self, paths: Iterable[JoinPath]) -> None:
        for path in paths:
            self.add(path)

    def model_for(self, path: JoinPath) -> type:
        """Mapped class reached at *path* (the root model for ``()``)."""
        if not path:
            return self.model
        return self._joined[tuple(path)][0]

    def alias_for(self, path: JoinPath) -> Any:
        """Entity whose columns represent *path* in the joined query.

        Raises:
            KeyError: If *path* was never added.
        """
        path = tuple(path)
        if not path:
            return self.model
        if path not in self._joined:
            raise KeyError(f"Relationship path {'.'.join(path)!r} is not joined")
        return self._joined[path][1]

    def apply(self, stmt: Select[Any]) -> Select[Any]:
        """Return *stmt* with a LEFT OUTER JOIN for every joined path."""
        for path, (_, alias) in self._joined.items():
            parent = self.alias_for(path[:-1])
            stmt = stmt.outerjoin(getattr(parent, path[-1]).of_type(alias))
        return stmt
