"""Exception hierarchy for sqla-ability."""

from __future__ import annotations

__all__ = [
    "AuthzError",
    "InvalidEnumValueError",
    "MalformedConditionTreeError",
    "NoRulesError",
    "RuleCompilationError",
    "SchemaMismatchError",
]


class AuthzError(Exception):
    """Base exception for all sqla-ability errors."""


class NoRulesError(AuthzError):
    """No rules registered for (resource_type, action).

    Raised when configured to error on missing rules instead of
    the default deny-by-default (WHERE FALSE) behavior.

    Attributes:
        resource_type: The resource type with no rules.
        action: The action with no rules.

    Example::

        configure(on_missing_rules="raise")
        # Now missing rules raise instead of silently denying
    """

    def __init__(
        self,
        *,
        resource_type: str,
        action: str,
    ) -> None:
        self.resource_type = resource_type
        self.action = action
        super().__init__(f"No rules registered for ({resource_type}, {action!r})")


class RuleCompilationError(AuthzError):
    """A rule set could not be compiled into a SQL filter.

    Base class for the compile faults below. These signal a programming
    or schema-drift error, so the compiler never catches or retries them.
    """


class SchemaMismatchError(RuleCompilationError):
    """A condition references a relationship or attribute the model lacks.

    Attributes:
        model: Name of the model class the name was resolved against.
        name: The unresolved relationship or attribute name.
        kind: ``"relationship"`` or ``"attribute"``.

    Example::

        # Post has no "publisher" relationship
        compile_rules(Post, [Rule(grants=True, conditions={"publisher": {"id": 1}})])
        # SchemaMismatchError: Post has no relationship 'publisher'
    """

    def __init__(self, *, model: str, name: str, kind: str) -> None:
        self.model = model
        self.name = name
        self.kind = kind
        super().__init__(f"{model} has no {kind} {name!r}")


class InvalidEnumValueError(RuleCompilationError):
    """An enumeration condition value has no stored representation.

    Attributes:
        model: Name of the model class declaring the enumeration.
        attribute: The enumeration attribute name.
        value: The value that could not be decoded.
    """

    def __init__(self, *, model: str, attribute: str, value: object) -> None:
        self.model = model
        self.attribute = attribute
        self.value = value
        super().__init__(f"{value!r} is not a valid value for enumeration {model}.{attribute}")


class MalformedConditionTreeError(RuleCompilationError):
    """A condition value is neither a scalar, an enumerable, nor a nested tree.

    Also raised when a rule function returns something other than a
    mapping, or a condition key is not a string.

    Attributes:
        key: The condition key holding the bad value (``None`` for a bad tree).
        value: The offending value.
    """

    def __init__(self, *, key: object, value: object, message: str | None = None) -> None:
        self.key = key
        self.value = value
        if message is None:
            message = (
                f"Condition {key!r} has unsupported value {value!r} "
                f"({type(value).__name__}); expected a scalar, a list/tuple/set, or a mapping"
            )
        super().__init__(message)
