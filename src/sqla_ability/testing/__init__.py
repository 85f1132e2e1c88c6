"""sqla-ability testing utilities — MockActor, assertions, and fixtures.

- **MockActor / factories**: Lightweight actors for rule functions.
- **Assertion helpers**: ``assert_authorized``, ``assert_denied``,
  ``assert_accessible_ids``, ``assert_query_contains``.
- **Fixtures**: ``ability_registry``, ``ability_reflector``,
  ``ability_config``, ``isolated_ability_state``.

Example::

    from sqla_ability.testing import MockActor, assert_accessible_ids

    def test_owner_reads_own(session, sample_data):
        assert_accessible_ids(session, select(Post), MockActor(id=1), "read", {1, 2})
"""

from sqla_ability.testing._actors import MockActor, make_admin, make_anonymous, make_member
from sqla_ability.testing._assertions import (
    assert_accessible_ids,
    assert_authorized,
    assert_denied,
    assert_query_contains,
)
from sqla_ability.testing._fixtures import (
    ability_config,
    ability_reflector,
    ability_registry,
    isolated_ability_state,
)
from sqla_ability.testing._isolation import isolated_ability

__all__ = [
    "MockActor",
    "ability_config",
    "ability_reflector",
    "ability_registry",
    "assert_accessible_ids",
    "assert_authorized",
    "assert_denied",
    "assert_query_contains",
    "isolated_ability",
    "isolated_ability_state",
    "make_admin",
    "make_anonymous",
    "make_member",
]
