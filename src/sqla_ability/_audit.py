"""Audit logging for rule evaluation decisions."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import ColumnElement

from sqla_ability._types import ActorLike, JoinPath, OnMissingRules
from sqla_ability.rules._base import Rule

__all__ = ["log_rule_evaluation"]

logger = logging.getLogger("sqla_ability")


def log_rule_evaluation(
    *,
    entity: type,
    action: str,
    actor: ActorLike,
    rules: Sequence[Rule],
    joins: Sequence[JoinPath] = (),
    result_expr: ColumnElement[bool] | None = None,
    on_missing_rules: OnMissingRules = "deny",
) -> None:
    """Log a rule evaluation decision.

    Logging levels:
    - INFO: Summary (entity, action, rule count)
    - DEBUG: Detailed (rule names and polarity, join paths, filter expression)
    - WARNING: No rule found (deny-by-default, or NoRulesError when
      *on_missing_rules* is ``"raise"``)

    Example::

        log_rule_evaluation(
            entity=Post,
            action="read",
            actor=current_user,
            rules=rules,
            joins=[("author",)],
            result_expr=compiled_filter,
        )
    """
    entity_name = entity.__name__
    rule_count = len(rules)

    if rule_count == 0:
        outcome = "raising NoRulesError" if on_missing_rules == "raise" else "deny-by-default applied"
        logger.warning(
            "No rules registered for (%s, %r) — %s",
            entity_name,
            action,
            outcome,
        )
        return

    # INFO: summary
    logger.info(
        "Rule evaluation: %s.%s — %d rule(s) applied for actor %r",
        entity_name,
        action,
        rule_count,
        actor,
    )

    # DEBUG: details
    if logger.isEnabledFor(logging.DEBUG):
        rule_names = [f"{'can' if r.grants else 'cannot'}:{r.name or '<anonymous>'}" for r in rules]
        logger.debug(
            "Rules for %s.%s: %s — joins: %s — filter: %s",
            entity_name,
            action,
            rule_names,
            [".".join(path) for path in joins],
            "<unconditional>" if result_expr is None else result_expr,
        )
