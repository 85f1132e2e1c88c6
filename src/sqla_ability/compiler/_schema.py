"""Schema reflection — resolve relationships, columns and enumeration attributes.

The compiler never probes model classes directly. It asks a
``SchemaReflector`` which related model a relationship name leads to and
whether an attribute is a plain column or an enumeration whose rule
conditions are written symbolically but stored as integers.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, Union

from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from sqla_ability.exceptions import InvalidEnumValueError, SchemaMismatchError

__all__ = [
    "AttributeKind",
    "EnumAttribute",
    "MapperReflector",
    "ScalarAttribute",
    "SchemaReflector",
    "get_default_reflector",
]

# Class attribute a model may define to declare its enumeration attributes:
#   __enum_attributes__ = {"status": {"active": 1, "archived": 2}}
ENUM_DECLARATION = "__enum_attributes__"


@dataclass(frozen=True, slots=True)
class ScalarAttribute:
    """A plain column compared literally."""


@dataclass(frozen=True, slots=True)
class EnumAttribute:
    """An integer column whose conditions use symbolic names.

    Attributes:
        model: The declaring model class.
        name: The attribute name.
        mapping: Symbolic name -> stored integer.
    """

    model: type
    name: str
    mapping: Mapping[str, int]

    def decode(self, value: Any) -> int | None:
        """Translate a symbolic condition value to its stored integer.

        Accepts the symbolic name, an ``enum.Enum`` member (matched by
        name), or an integer that is already one of the stored values.
        ``None`` passes through unchanged and compares as NULL.

        Raises:
            InvalidEnumValueError: If *value* has no stored representation.
        """
        if value is None:
            return None
        if isinstance(value, enum.Enum):
            key: Any = value.name
        else:
            key = value
        if isinstance(key, str) and key in self.mapping:
            return self.mapping[key]
        if isinstance(key, int) and not isinstance(key, bool) and key in self.mapping.values():
            return key
        raise InvalidEnumValueError(model=self.model.__name__, attribute=self.name, value=value)


AttributeKind = Union[ScalarAttribute, EnumAttribute]

_SCALAR = ScalarAttribute()


def _normalize_enum(declared: Any) -> dict[str, int]:
    if isinstance(declared, type) and issubclass(declared, enum.Enum):
        return {member.name: member.value for member in declared}
    return dict(declared)


class SchemaReflector(Protocol):
    """What the compiler needs to know about the mapped schema."""

    def resolve_relation(self, model: type, name: str) -> type: ...

    def resolve_column(self, entity: Any, model: type, name: str) -> Any: ...

    def attribute_kind(self, model: type, name: str) -> AttributeKind: ...


class MapperReflector:
    """``SchemaReflector`` backed by SQLAlchemy mapper inspection.

    Enumeration attributes come from the model's ``__enum_attributes__``
    declaration or from :meth:`register_enum`. Attribute kinds are
    resolved once per ``(model, name)`` and memoised; after registration
    the reflector is only read, so it may be shared between threads.

    Example::

        reflector = MapperReflector()
        reflector.register_enum(Post, "status", {"draft": 0, "live": 1})
        reflector.resolve_relation(Post, "author")  # -> User
    """

    def __init__(self) -> None:
        self._enums: dict[tuple[type, str], dict[str, int]] = {}
        self._kinds: dict[tuple[type, str], AttributeKind] = {}

    def register_enum(
        self,
        model: type,
        attribute: str,
        mapping: Mapping[str, int] | type[enum.Enum],
    ) -> None:
        """Declare *attribute* on *model* as enumeration-valued.

        Args:
            model: The SQLAlchemy model class.
            attribute: Name of the integer column.
            mapping: Symbolic name -> stored integer, or an ``enum.Enum``
                subclass whose member values are the stored integers.

        Raises:
            SchemaMismatchError: If *attribute* is not a column of *model*.
        """
        self._require_column(model, attribute)
        self._enums[(model, attribute)] = _normalize_enum(mapping)
        self._kinds.pop((model, attribute), None)

    def resolve_relation(self, model: type, name: str) -> type:
        """Return the model class reached through relationship *name*.

        Raises:
            SchemaMismatchError: If *model* has no such relationship.
        """
        mapper = self._mapper(model)
        if name not in mapper.relationships:
            raise SchemaMismatchError(model=model.__name__, name=name, kind="relationship")
        target: type = mapper.relationships[name].mapper.class_
        return target

    def resolve_column(self, entity: Any, model: type, name: str) -> Any:
        """Return the column attribute *name* on *entity*.

        *entity* is *model* itself or an ``aliased()`` form of it.

        Raises:
            SchemaMismatchError: If *name* is not a mapped column attribute.
        """
        self._require_column(model, name)
        return getattr(entity, name)

    def attribute_kind(self, model: type, name: str) -> AttributeKind:
        """Return whether *name* on *model* is a plain or enumeration attribute."""
        key = (model, name)
        kind = self._kinds.get(key)
        if kind is None:
            kind = self._lookup_kind(model, name)
            self._kinds[key] = kind
        return kind

    def _lookup_kind(self, model: type, name: str) -> AttributeKind:
        mapping = self._enums.get((model, name))
        if mapping is None:
            declared = getattr(model, ENUM_DECLARATION, None) or {}
            if name in declared:
                mapping = _normalize_enum(declared[name])
        if mapping is None:
            return _SCALAR
        return EnumAttribute(model=model, name=name, mapping=mapping)

    def _require_column(self, model: type, name: str) -> None:
        mapper = self._mapper(model)
        if name not in mapper.column_attrs:
            raise SchemaMismatchError(model=model.__name__, name=name, kind="attribute")

    @staticmethod
    def _mapper(model: type) -> Mapper[Any]:
        mapper: Mapper[Any] = sa_inspect(model)
        return mapper


# Module-level default reflector (singleton).
_default_reflector = MapperReflector()


def get_default_reflector() -> MapperReflector:
    """Return the global default ``MapperReflector``.

    Used by the compiler when no explicit reflector is passed.
    """
    return _default_reflector
