"""Rule source — registration and lookup of allow/deny rules."""

from sqla_ability.rules._base import Rule, RuleRegistration
from sqla_ability.rules._decorator import can, cannot, rule, unconditional
from sqla_ability.rules._registry import RuleRegistry, get_default_registry

__all__ = [
    "Rule",
    "RuleRegistration",
    "RuleRegistry",
    "can",
    "cannot",
    "get_default_registry",
    "rule",
    "unconditional",
]
