""" This module provides the :class:`TypeFamily`, which assigns a value type to every key of a finite map, and the
:class:`Key` class for keys that carry their own value type. Python has no dependent types, so the assignment
is checked at runtime whenever a value enters a map that has a family attached. """

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Generic, Hashable, Mapping, TypeVar

from nr.stream import NotSet
from typeapi import AnnotatedTypeHint, ClassTypeHint, TypeHint, UnionTypeHint

from finmap.core.exceptions import FamilyTypeError

T = TypeVar("T")

Resolver = Callable[[Any], Any]


@dataclasses.dataclass(frozen=True)
class Key(Generic[T]):
    """A key that declares the type of its value.

    .. code:: Example

        from finmap.core import Finmap, Key, TypeFamily

        PORT = Key("port", int)
        HOST = Key("host", str)

        config = Finmap.empty(TypeFamily.by_key()).insert(PORT, 8080).insert(HOST, "localhost")
    """

    name: str
    value_type: Any

    def __str__(self) -> str:
        return self.name


def _accepted_types(hint: Any) -> tuple[type, ...] | None:
    """Internal. Returns the classes that a value may be an instance of, or `None` if any value is accepted."""

    if hint is Any or hint is object:
        return None
    if hint is None:
        hint = type(None)

    type_hint = hint if isinstance(hint, TypeHint) else TypeHint(hint)
    if isinstance(type_hint, AnnotatedTypeHint):
        type_hint = TypeHint(type_hint.type)

    members = list(type_hint) if isinstance(type_hint, UnionTypeHint) else [type_hint]
    accepted = []
    for member in members:
        # NOTE: Only the origin of a generic type is checked, items of containers are not inspected.
        if not isinstance(member, ClassTypeHint):
            raise TypeError(f"value type must be a type or a union of types, got {hint!r}")
        accepted.append(member.type)
    return tuple(accepted)


def _describe(accepted: tuple[type, ...]) -> str:
    return " or ".join(t.__name__ for t in accepted)


class TypeFamily:
    """Assigns each key the type of value it may hold.

    :param resolve: Either a mapping from keys to type hints, or a function that returns the type hint for a
        key (or :attr:`NotSet.Value` if it does not know the key).
    :param default: The type hint for keys that *resolve* does not know. If not set, such keys are rejected.
    """

    def __init__(self, resolve: Mapping[Hashable, Any] | Resolver, default: Any = NotSet.Value) -> None:
        if isinstance(resolve, Mapping):
            for hint in resolve.values():
                _accepted_types(hint)
            table = dict(resolve)
            self._resolve: Resolver = lambda key: table.get(key, NotSet.Value)
        elif callable(resolve):
            self._resolve = resolve
        else:
            raise TypeError(f'"resolve" must be a mapping or callable, got {type(resolve).__name__}')
        if default is not NotSet.Value:
            _accepted_types(default)
        self._default = default

    def __repr__(self) -> str:
        return f"TypeFamily(default={'<unset>' if self._default is NotSet.Value else self._default!r})"

    @classmethod
    def uniform(cls, value_type: Any) -> TypeFamily:
        """A family that assigns the same type to every key."""

        return cls({}, default=value_type)

    @classmethod
    def by_key(cls, default: Any = NotSet.Value) -> TypeFamily:
        """A family that reads the value type from :class:`Key` objects."""

        def resolve(key: Any) -> Any:
            return key.value_type if isinstance(key, Key) else NotSet.Value

        return cls(resolve, default)

    def value_type(self, key: Any) -> Any:
        """Return the type hint for *key*, or :attr:`NotSet.Value` if the family does not define one."""

        hint = self._resolve(key)
        return self._default if hint is NotSet.Value else hint

    def accepts(self, key: Any, value: Any) -> bool:
        try:
            self.check(key, value)
        except FamilyTypeError:
            return False
        return True

    def check(self, key: Any, value: T) -> T:
        """Return *value* if it matches the type assigned to *key*.

        :raises FamilyTypeError: If it does not, or if the family assigns no type to *key*.
        """

        hint = self.value_type(key)
        if hint is NotSet.Value:
            raise FamilyTypeError(key, value, None)
        accepted = _accepted_types(hint)
        if accepted is not None and not isinstance(value, accepted):
            raise FamilyTypeError(key, value, _describe(accepted))
        return value

