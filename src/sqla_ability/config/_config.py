"""Layered configuration for sqla-ability."""

from __future__ import annotations

from dataclasses import dataclass

from sqla_ability._types import OnMissingRules

__all__ = [
    "AbilityConfig",
    "configure",
    "get_global_config",
    "_reset_global_config",
    "_set_global_config",
]

_VALID_ON_MISSING_RULES: set[str] = {"deny", "raise"}


@dataclass(frozen=True, slots=True)
class AbilityConfig:
    """Layered configuration with merge semantics (global -> call site).

    Attributes:
        on_missing_rules: Behavior when no rule is registered.
            ``"deny"`` returns zero rows (WHERE FALSE).
            ``"raise"`` raises ``NoRulesError``.
        default_action: The action used by ``accessible_query`` when none
            is specified.
        log_rule_decisions: Emit audit records through the
            ``sqla_ability`` logger.
        apply_distinct: Append ``DISTINCT`` to compiled queries so rows
            multiplied by one-to-many outer joins appear once.

    Example::

        config = AbilityConfig(on_missing_rules="raise")
        merged = config.merge(default_action="update")
    """

    on_missing_rules: OnMissingRules = "deny"
    default_action: str = "read"
    log_rule_decisions: bool = False
    apply_distinct: bool = True

    def __post_init__(self) -> None:
        if self.on_missing_rules not in _VALID_ON_MISSING_RULES:
            raise ValueError(
                f"on_missing_rules must be one of {_VALID_ON_MISSING_RULES!r}, "
                f"got {self.on_missing_rules!r}"
            )
        if not self.default_action:
            raise ValueError("default_action must be a non-empty string")

    def merge(
        self,
        *,
        on_missing_rules: OnMissingRules | None = None,
        default_action: str | None = None,
        log_rule_decisions: bool | None = None,
        apply_distinct: bool | None = None,
    ) -> AbilityConfig:
        """Return a new config with non-None overrides applied.

        Args:
            on_missing_rules: Override for on_missing_rules (ignored if None).
            default_action: Override for default_action (ignored if None).
            log_rule_decisions: Override for log_rule_decisions (ignored if None).
            apply_distinct: Override for apply_distinct (ignored if None).

        Returns:
            A new ``AbilityConfig`` with overrides merged.

        Example::

            base = AbilityConfig()
            query_cfg = base.merge(on_missing_rules="raise")
        """
        return AbilityConfig(
            on_missing_rules=(
                on_missing_rules if on_missing_rules is not None else self.on_missing_rules
            ),
            default_action=(default_action if default_action is not None else self.default_action),
            log_rule_decisions=(
                log_rule_decisions if log_rule_decisions is not None else self.log_rule_decisions
            ),
            apply_distinct=(apply_distinct if apply_distinct is not None else self.apply_distinct),
        )


# ---------------------------------------------------------------------------
# Global configuration singleton
# ---------------------------------------------------------------------------

_global_config = AbilityConfig()


def get_global_config() -> AbilityConfig:
    """Return the current global configuration.

    Example::

        config = get_global_config()
        print(config.on_missing_rules)  # "deny"
    """
    return _global_config


def configure(
    *,
    on_missing_rules: OnMissingRules | None = None,
    default_action: str | None = None,
    log_rule_decisions: bool | None = None,
    apply_distinct: bool | None = None,
) -> AbilityConfig:
    """Update the global configuration by merging overrides.

    Only non-None values are applied. Returns the new global config.

    Args:
        on_missing_rules: Set to ``"deny"`` or ``"raise"``.
        default_action: Set the default action string.
        log_rule_decisions: Enable/disable audit logging of rule decisions.
        apply_distinct: Enable/disable ``DISTINCT`` on compiled queries.

    Returns:
        The updated global ``AbilityConfig``.

    Example::

        configure(on_missing_rules="raise")
        # Now missing rules raise NoRulesError instead of denying
    """
    global _global_config
    _global_config = _global_config.merge(
        on_missing_rules=on_missing_rules,
        default_action=default_action,
        log_rule_decisions=log_rule_decisions,
        apply_distinct=apply_distinct,
    )
    return _global_config


def _set_global_config(cfg: AbilityConfig) -> None:
    """Replace global config with an exact snapshot. For testing only."""
    global _global_config
    _global_config = cfg


def _reset_global_config() -> None:
    """Reset global config to defaults. For testing only."""
    global _global_config
    _global_config = AbilityConfig()
