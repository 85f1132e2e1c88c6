"""sqla-ability — compile allow/deny rules into SQLAlchemy 2.0 queries.

Ordered, declarative rules with nested condition trees become one set of
LEFT OUTER JOINs and a single WHERE clause, so "every record this actor
may read" is one SQL query instead of N in-memory checks.

Example::

    from sqla_ability import accessible_query, can, cannot

    @can(Post, "read")
    def own_posts(actor: User) -> dict:
        return {"author_id": actor.id}

    @cannot(Post, "read")
    def hide_archived(actor: User) -> dict:
        return {"status": "archived"}

    stmt = accessible_query(select(Post), actor=current_user, action="read")
    result = await session.execute(stmt)
"""

from importlib.metadata import PackageNotFoundError, version

from sqla_ability._types import ActorLike, ConditionTree, JoinPath
from sqla_ability.compiler._joins import JoinSet, plan_joins
from sqla_ability.compiler._predicate import compile_rules
from sqla_ability.compiler._query import accessible_query, apply_rules
from sqla_ability.compiler._schema import MapperReflector, get_default_reflector
from sqla_ability.config._config import AbilityConfig, configure
from sqla_ability.exceptions import (
    AuthzError,
    InvalidEnumValueError,
    MalformedConditionTreeError,
    NoRulesError,
    RuleCompilationError,
    SchemaMismatchError,
)
from sqla_ability.rules._base import Rule
from sqla_ability.rules._decorator import can, cannot, rule, unconditional
from sqla_ability.rules._registry import RuleRegistry

try:
    __version__ = version("sqla-ability")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "__version__",
    "AbilityConfig",
    "ActorLike",
    "AuthzError",
    "ConditionTree",
    "InvalidEnumValueError",
    "JoinPath",
    "JoinSet",
    "MalformedConditionTreeError",
    "MapperReflector",
    "NoRulesError",
    "Rule",
    "RuleCompilationError",
    "RuleRegistry",
    "SchemaMismatchError",
    "accessible_query",
    "apply_rules",
    "can",
    "cannot",
    "compile_rules",
    "configure",
    "get_default_reflector",
    "plan_joins",
    "rule",
    "unconditional",
]
