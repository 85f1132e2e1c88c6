"""Predicate compiler — fold ordered allow/deny rules into one filter.

Each rule becomes a conjunction of per-attribute comparisons. Allow rules
compare with ``=`` and are OR'd onto the filter built so far; deny rules
compare with a NULL-safe ``!=`` (``IS DISTINCT FROM``) and are AND'd onto it,
so a row whose outer-joined relation is missing is not hidden by a deny
rule that mentions that relation.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import logging
import operator
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import reduce
from typing import Any

from sqlalchemy import ColumnElement, and_, or_

from sqla_ability._types import Comparator, ConditionTree, JoinPath
from sqla_ability.compiler._joins import JoinSet
from sqla_ability.compiler._schema import EnumAttribute, SchemaReflector, get_default_reflector
from sqla_ability.exceptions import MalformedConditionTreeError
from sqla_ability.rules._base import Rule

__all__ = [
    "TraversalContext",
    "build_expression_node",
    "build_rule_expression",
    "compile_rules",
    "distinct_from",
]

logger = logging.getLogger(__name__)

_SCALAR_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    decimal.Decimal,
    str,
    bytes,
    datetime.date,
    datetime.datetime,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    enum.Enum,
)
_ENUMERABLE_TYPES: tuple[type, ...] = (list, tuple, set, frozenset)


@dataclass(frozen=True, slots=True)
class TraversalContext:
    """Position in a condition tree, as seen from the root model.

    Contexts are values: :meth:`descend` returns a new child context and
    never touches the receiver, so sibling branches of one tree cannot
    leak constraints into each other and the root context stays usable
    after compilation.

    Attributes:
        model: Mapped class at this position.
        entity: Mapped class or aliased entity whose columns are compared.
        path: Relationship names from the root model.
        joins: Joins the query carries, or ``None`` to reference mapped
            classes directly.
        reflector: Schema reflection used to resolve names.
    """

    model: type
    entity: Any
    path: JoinPath
    joins: JoinSet | None
    reflector: SchemaReflector

    @classmethod
    def root(
        cls,
        model: type,
        *,
        joins: JoinSet | None = None,
        reflector: SchemaReflector | None = None,
    ) -> TraversalContext:
        if reflector is None:
            reflector = joins.reflector if joins is not None else get_default_reflector()
        return cls(model=model, entity=model, path=(), joins=joins, reflector=reflector)

    def descend(self, name: str) -> TraversalContext:
        """Child context reached through relationship *name*.

        Raises:
            SchemaMismatchError: If the relationship does not exist.
            KeyError: If *joins* were given but do not include the path.
        """
        target = self.reflector.resolve_relation(self.model, name)
        path = (*self.path, name)
        entity = self.joins.alias_for(path) if self.joins is not None else target
        return TraversalContext(
            model=target,
            entity=entity,
            path=path,
            joins=self.joins,
            reflector=self.reflector,
        )

    def column(self, name: str) -> Any:
        return self.reflector.resolve_column(self.entity, self.model, name)


def compile_rules(
    model: type,
    rules: Sequence[Rule],
    *,
    joins: JoinSet | None = None,
    reflector: SchemaReflector | None = None,
) -> ColumnElement[bool] | None:
    """Fold *rules* left to right into a single filter expression.

    Returns ``None`` when the result is unconditional: there are no
    rules, or a rule without conditions was reached. An unconditional
    rule ends the fold whatever its polarity; rules after it are not
    compiled.

    Args:
        model: The root SQLAlchemy model class.
        rules: Rules in the order they must be applied.
        joins: Joins already attached to the query. Nested conditions
            then reference the joined aliases. Without it, nested
            conditions reference the related mapped classes directly.
        reflector: Schema reflection. Defaults to ``joins.reflector`` or
            the global reflector.

    Raises:
        SchemaMismatchError: A condition names a missing relationship or column.
        InvalidEnumValueError: An enumeration value cannot be decoded.
        MalformedConditionTreeError: A condition value has an unsupported type.

    Example::

        compile_rules(Document, [
            Rule(grants=True, conditions={"owner_id": 5}),
            Rule(grants=False, conditions={"locked": True}),
        ])
        # documents.owner_id = 5 AND documents.locked IS DISTINCT FROM true
    """
    accumulator: ColumnElement[bool] | None = None
    for position, rule in enumerate(rules):
        right = build_rule_expression(model, rule, joins=joins, reflector=reflector)
        if right is None:
            logger.debug(
                "Rule %d (%s) on %s is unconditional; filter dropped",
                position,
                rule.name or "<anonymous>",
                model.__name__,
            )
            return None
        if accumulator is None:
            accumulator = right
        elif rule.grants:
            accumulator = or_(accumulator, right)
        else:
            accumulator = and_(accumulator, right)
    return accumulator


def build_rule_expression(
    model: type,
    rule: Rule,
    *,
    joins: JoinSet | None = None,
    reflector: SchemaReflector | None = None,
) -> ColumnElement[bool] | None:
    """Build the conjunction of one rule's conditions.

    Returns ``None`` for a rule without conditions.
    """
    if not isinstance(rule.conditions, Mapping):
        raise MalformedConditionTreeError(
            key=None,
            value=rule.conditions,
            message=f"Rule conditions must be a mapping, got {type(rule.conditions).__name__}",
        )
    if not rule.conditions:
        return None
    comparator: Comparator = operator.eq if rule.grants else distinct_from
    context = TraversalContext.root(model, joins=joins, reflector=reflector)
    return build_expression_node(context, comparator, rule.conditions)


def build_expression_node(
    context: TraversalContext,
    comparator: Comparator,
    conditions: ConditionTree,
) -> ColumnElement[bool]:
    """AND together one comparison per condition at *context*.

    Nested mappings recurse into the related model with the same
    comparator.
    """
    comparisons = [
        _build_comparison(context, comparator, key, value) for key, value in conditions.items()
    ]
    if not comparisons:
        raise MalformedConditionTreeError(
            key=context.path[-1] if context.path else None,
            value=conditions,
            message=f"Empty nested condition under {'.'.join(context.path)!r}",
        )
    return reduce(lambda left, right: and_(left, right), comparisons)


def _build_comparison(
    context: TraversalContext,
    comparator: Comparator,
    key: Any,
    value: Any,
) -> ColumnElement[bool]:
    if not isinstance(key, str):
        raise MalformedConditionTreeError(
            key=key, value=value, message=f"Condition key {key!r} is not a string"
        )

    if isinstance(value, Mapping):
        return build_expression_node(context.descend(key), comparator, value)

    column = context.column(key)
    kind = context.reflector.attribute_kind(context.model, key)

    if isinstance(value, _ENUMERABLE_TYPES):
        values = [_check_scalar(key, item) for item in value]
        if isinstance(kind, EnumAttribute):
            values = [kind.decode(item) for item in values]
        return _membership(column, comparator, values)

    value = _check_scalar(key, value)
    if isinstance(kind, EnumAttribute):
        value = kind.decode(value)
    result: ColumnElement[bool] = comparator(column, value)
    return result


def distinct_from(column: Any, value: Any) -> ColumnElement[bool]:
    """Deny comparator: NULL counts as different from any value."""
    result: ColumnElement[bool] = column.is_distinct_from(value)
    return result


def _membership(column: Any, comparator: Comparator, values: list[Any]) -> ColumnElement[bool]:
    # NULL never matches IN, so a None member becomes its own IS NULL branch
    present = [item for item in values if item is not None]
    includes_null = len(present) != len(values)
    if comparator is operator.eq:
        result: ColumnElement[bool] = column.in_(present)
        if includes_null:
            result = or_(column.is_(None), result)
    elif includes_null:
        result = and_(column.is_not(None), column.not_in(present))
    else:
        result = or_(column.is_(None), column.not_in(present))
    return result


def _check_scalar(key: str, value: Any) -> Any:
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    raise MalformedConditionTreeError(key=key, value=value)
