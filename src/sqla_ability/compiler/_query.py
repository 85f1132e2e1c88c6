"""apply_rules() and accessible_query() — attach compiled rules to SELECTs."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, Select, false

from sqla_ability._types import ActorLike
from sqla_ability.compiler._expression import evaluate_rules
from sqla_ability.compiler._joins import JoinSet, plan_joins
from sqla_ability.compiler._predicate import compile_rules
from sqla_ability.compiler._schema import SchemaReflector
from sqla_ability.config._config import AbilityConfig, get_global_config
from sqla_ability.exceptions import NoRulesError
from sqla_ability.rules._base import Rule
from sqla_ability.rules._registry import RuleRegistry, get_default_registry

__all__ = ["accessible_query", "apply_rules"]


def _compile_into(
    stmt: Select[Any],
    model: type,
    rules: Sequence[Rule],
    reflector: SchemaReflector | None,
) -> tuple[Select[Any], JoinSet, ColumnElement[bool] | None]:
    joins = JoinSet(model, reflector=reflector)
    for rule in rules:
        joins.add_all(plan_joins(rule.conditions))
    stmt = joins.apply(stmt)

    filter_expr = compile_rules(model, rules, joins=joins)
    if filter_expr is not None:
        stmt = stmt.where(filter_expr)
    return stmt, joins, filter_expr


def apply_rules(
    stmt: Select[Any],
    model: type,
    rules: Sequence[Rule],
    *,
    reflector: SchemaReflector | None = None,
    config: AbilityConfig | None = None,
) -> Select[Any]:
    """Outer-join everything *rules* reference and filter by them.

    Every rule's join paths are merged into one set of LEFT OUTER JOINs
    first; the folded rule filter is then attached as a single WHERE
    clause. A related row that is missing never removes the root row.

    ``DISTINCT`` is appended (unless ``apply_distinct`` is off) because
    joins across one-to-many relationships repeat root rows.

    Args:
        stmt: A SELECT over *model*.
        model: The root SQLAlchemy model class.
        rules: Rules in the order they must be applied.
        reflector: Optional schema reflector. Defaults to the global one.
        config: Optional config. Defaults to the global config.

    Returns:
        A new Select; *stmt* is left untouched.

    Example::

        stmt = apply_rules(select(Document), Document, [
            Rule(grants=True, conditions={"owner_id": 5}),
            Rule(grants=False, conditions={"locked": True}),
        ])
        # SELECT DISTINCT ... FROM documents
        #   WHERE documents.owner_id = 5 AND documents.locked IS DISTINCT FROM true
    """
    cfg = config if config is not None else get_global_config()
    stmt, _, _ = _compile_into(stmt, model, rules, reflector)
    if cfg.apply_distinct:
        stmt = stmt.distinct()
    return stmt


def accessible_query(
    stmt: Select[Any],
    *,
    actor: ActorLike,
    action: str | None = None,
    registry: RuleRegistry | None = None,
    reflector: SchemaReflector | None = None,
) -> Select[Any]:
    """Restrict a SELECT to the rows *actor* may perform *action* on.

    Looks up the registered rules for each ORM entity in the statement,
    evaluates them for the actor, and applies the joins and filter they
    compile to.

    Args:
        stmt: A SQLAlchemy 2.0 Select statement.
        actor: The user/principal. Must satisfy ActorLike protocol.
        action: The action being performed. Defaults to the configured
            ``default_action``.
        registry: Optional custom registry. Defaults to the global registry.
        reflector: Optional schema reflector. Defaults to the global one.

    Returns:
        A new Select with authorization joins and filters applied.

    Raises:
        NoRulesError: If an entity has no rules and ``on_missing_rules``
            is ``"raise"``.

    Example::

        stmt = select(Post).where(Post.category == "tech")
        stmt = accessible_query(stmt, actor=current_user, action="read")
        result = session.execute(stmt).scalars().all()
    """
    cfg = get_global_config()
    target_registry = registry if registry is not None else get_default_registry()
    effective_action = action if action is not None else cfg.default_action

    desc_list: list[dict[str, Any]] = stmt.column_descriptions
    for desc in desc_list:
        entity: type | None = desc.get("entity")
        if entity is None:
            continue

        rules = evaluate_rules(target_registry, entity, effective_action, actor)

        if not rules:
            if cfg.log_rule_decisions:
                from sqla_ability._audit import log_rule_evaluation

                log_rule_evaluation(
                    entity=entity,
                    action=effective_action,
                    actor=actor,
                    rules=rules,
                    on_missing_rules=cfg.on_missing_rules,
                )
            if cfg.on_missing_rules == "raise":
                raise NoRulesError(resource_type=entity.__name__, action=effective_action)
            stmt = stmt.where(false())
            continue

        stmt, joins, filter_expr = _compile_into(stmt, entity, rules, reflector)

        if cfg.log_rule_decisions:
            from sqla_ability._audit import log_rule_evaluation

            log_rule_evaluation(
                entity=entity,
                action=effective_action,
                actor=actor,
                rules=rules,
                joins=joins.paths,
                result_expr=filter_expr,
            )

    if cfg.apply_distinct:
        stmt = stmt.distinct()
    return stmt
