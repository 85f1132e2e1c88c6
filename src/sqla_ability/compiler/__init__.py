"""Compiler — transforms ordered rules into outer joins and SQL filters."""

from sqla_ability.compiler._expression import evaluate_rules
from sqla_ability.compiler._joins import JoinSet, plan_joins
from sqla_ability.compiler._predicate import (
    TraversalContext,
    build_expression_node,
    build_rule_expression,
    compile_rules,
    distinct_from,
)
from sqla_ability.compiler._query import accessible_query, apply_rules
from sqla_ability.compiler._schema import (
    EnumAttribute,
    MapperReflector,
    ScalarAttribute,
    SchemaReflector,
    get_default_reflector,
)

__all__ = [
    "EnumAttribute",
    "JoinSet",
    "MapperReflector",
    "ScalarAttribute",
    "SchemaReflector",
    "TraversalContext",
    "accessible_query",
    "apply_rules",
    "build_expression_node",
    "build_rule_expression",
    "compile_rules",
    "distinct_from",
    "evaluate_rules",
    "get_default_reflector",
    "plan_joins",
]
